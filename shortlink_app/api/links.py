from fastapi import APIRouter, Depends, Request

from shortlink_app.api.rate_limit import WRITE_LIMIT, limiter
from shortlink_app.dependencies import (
    get_code_generator,
    get_current_user_id,
    get_link_registry,
)
from shortlink_app.schemas.url import (
    ShortenRequest,
    ShortenResponse,
    URLItem,
    URLListResponse,
)
from shortlink_app.services.code_generator import CodeGenerator
from shortlink_app.services.link_registry import LinkRegistry
from shortlink_app.utils.validators import validate_destination_url

router = APIRouter(tags=["links"])


@router.post("/shorten", response_model=ShortenResponse)
@limiter.limit(WRITE_LIMIT)
async def shorten(
    request: Request,
    body: ShortenRequest,
    user_id: str = Depends(get_current_user_id),
    generator: CodeGenerator = Depends(get_code_generator)
):
    """Create a short link owned by the caller"""
    validate_destination_url(body.url)
    link = await generator.generate(user_id, body.url, custom_alias=body.custom_alias)
    return ShortenResponse(short_code=link.code)


@router.get("/urls", response_model=URLListResponse)
async def list_urls(
    user_id: str = Depends(get_current_user_id),
    registry: LinkRegistry = Depends(get_link_registry)
):
    """The caller's links, most recent first"""
    links = await registry.list_by_owner(user_id)
    return URLListResponse(urls=[URLItem.from_link(link) for link in links])
