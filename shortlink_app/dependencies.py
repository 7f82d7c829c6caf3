"""
FastAPI dependencies for dependency injection.

The gateway holds no state of its own: every request gets stores bound to a
request-scoped session, and the authenticated user is derived from the
bearer token on each call.
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from shortlink_app.cache.factory import CacheFactory, CacheBackend
from shortlink_app.cache.strategies import CacheStrategy
from shortlink_app.config import settings
from shortlink_app.database.connection import get_db
from shortlink_app.errors import AuthError
from shortlink_app.services.click_recorder import ClickRecorder
from shortlink_app.services.code_generator import CodeGenerator
from shortlink_app.services.identity_service import IdentityStore
from shortlink_app.services.link_registry import LinkRegistry

# auto_error=False: a missing header must be a 401 from our own error path
bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache()
def get_cache() -> CacheStrategy:
    """
    Get cache instance (singleton).

    @lru_cache ensures the factory runs only once per process.
    """
    backend = CacheBackend(settings.cache_backend)
    return CacheFactory.create(backend)


def get_identity_store(db: Session = Depends(get_db)) -> IdentityStore:
    return IdentityStore(db=db)


def get_link_registry(
    db: Session = Depends(get_db),
    cache: CacheStrategy = Depends(get_cache),
) -> LinkRegistry:
    return LinkRegistry(db=db, cache=cache)


def get_code_generator(registry: LinkRegistry = Depends(get_link_registry)) -> CodeGenerator:
    return CodeGenerator(registry=registry)


def get_click_recorder(
    db: Session = Depends(get_db),
    registry: LinkRegistry = Depends(get_link_registry),
) -> ClickRecorder:
    return ClickRecorder(db=db, registry=registry)


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    """Raw token from ``Authorization: Bearer <token>``"""
    if credentials is None or not credentials.credentials:
        raise AuthError("Authorization header required")
    return credentials.credentials


async def get_current_user_id(
    token: str = Depends(get_bearer_token),
    identity: IdentityStore = Depends(get_identity_store),
) -> str:
    """Authenticated user id for this request"""
    return await identity.validate(token)
