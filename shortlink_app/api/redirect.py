import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import sessionmaker

from shortlink_app.cache.strategies import CacheStrategy
from shortlink_app.config import settings
from shortlink_app.database.connection import get_session_factory
from shortlink_app.dependencies import get_cache, get_link_registry
from shortlink_app.errors import ShortlinkError
from shortlink_app.services.click_recorder import ClickRecorder
from shortlink_app.services.link_registry import LinkRegistry
from shortlink_app.utils.request_info import get_client_ip, visitor_fingerprint

logger = logging.getLogger(__name__)

router = APIRouter(tags=["redirect"])


async def record_click(
    session_factory: sessionmaker,
    cache: CacheStrategy,
    code: str,
    ip_address: str,
    user_agent: str,
    referer: str,
) -> None:
    """
    Record one click after the redirect has been produced.

    Runs outside the request, so it opens its own session. Failures are
    logged; the visitor already has their redirect.
    """
    db = session_factory()
    try:
        recorder = ClickRecorder(db=db, registry=LinkRegistry(db=db, cache=cache))
        await recorder.record(
            code,
            visitor_fingerprint(ip_address, user_agent),
            ip_address=ip_address,
            user_agent=user_agent,
            referer=referer,
        )
    except ShortlinkError as e:
        logger.error("Failed to record click for %s: %s", code, e.message)
    finally:
        db.close()


@router.get("/{code}")
async def redirect_to_destination(
    code: str,
    request: Request,
    background_tasks: BackgroundTasks,
    registry: LinkRegistry = Depends(get_link_registry),
    cache: CacheStrategy = Depends(get_cache),
    session_factory: sessionmaker = Depends(get_session_factory)
):
    """
    Redirect to the destination URL.

    1. Resolve through the registry (cache first)
    2. Schedule click recording in the background
    3. Redirect immediately
    """
    destination = await registry.resolve(code)

    background_tasks.add_task(
        record_click,
        session_factory,
        cache,
        code,
        get_client_ip(request),
        request.headers.get("user-agent", ""),
        request.headers.get("referer", ""),
    )

    return RedirectResponse(url=destination, status_code=settings.redirect_status_code)
