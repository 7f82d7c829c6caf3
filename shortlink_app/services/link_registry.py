import asyncio
import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shortlink_app.cache.strategies import CacheStrategy
from shortlink_app.config import settings
from shortlink_app.database.connection import store_operation
from shortlink_app.errors import ConflictError, InternalError, NotFoundError
from shortlink_app.models.link import CodeSequence, ShortLink
from shortlink_app.utils.validators import validate_destination_url

logger = logging.getLogger(__name__)


class LinkRegistry:
    """
    Durable short code -> (owner, destination, creation time) mapping.

    Sole writer of ``short_links``. ``create`` is the atomic reservation
    point: the unique constraint on ``code`` decides which of two concurrent
    inserts wins, so there is no separate check-then-write step.

    Lookups use Cache-Aside through the injected cache strategy; links are
    never modified after creation, so cached entries cannot go stale.

    Database work runs in a worker thread (``asyncio.to_thread``) so a slow
    store call only holds up its own request.
    """

    def __init__(self, db: Session, cache: Optional[CacheStrategy] = None):
        """
        Args:
            db: Database session
            cache: Cache strategy (optional, for redirect performance)
        """
        self.db = db
        self.cache = cache

    async def create(self, owner_id: str, destination_url: str, code: str) -> ShortLink:
        """
        Reserve ``code`` for ``destination_url`` on behalf of ``owner_id``.

        Raises:
            ValidationError: destination is not an acceptable http(s) URL
            ConflictError: code already exists
        """
        validate_destination_url(destination_url)

        link = await asyncio.to_thread(self._insert, owner_id, destination_url, code)
        logger.info("Created short link %s -> %s (owner %s)", code, destination_url, owner_id)

        if self.cache:
            await self.cache.set(self._cache_key(code), destination_url, ttl=settings.cache_ttl)

        return link

    async def resolve(self, code: str) -> str:
        """
        Destination URL for ``code``. Pure read.

        Raises:
            NotFoundError: code unknown
        """
        cache_key = self._cache_key(code)

        if self.cache:
            cached_url = await self.cache.get(cache_key)
            if cached_url:
                return cached_url

        destination = await asyncio.to_thread(self._lookup, code)
        if destination is None:
            raise NotFoundError("Short URL not found")

        if self.cache:
            await self.cache.set(cache_key, destination, ttl=settings.cache_ttl)

        return destination

    async def exists(self, code: str) -> bool:
        """Whether ``code`` is registered"""
        if self.cache and await self.cache.get(self._cache_key(code)):
            return True
        return await asyncio.to_thread(self._code_taken, code)

    async def list_by_owner(self, owner_id: str) -> List[ShortLink]:
        """All links of ``owner_id``, most recent first"""
        return await asyncio.to_thread(self._list_by_owner, owner_id)

    async def next_sequence(self) -> int:
        """Draw the next value of the code counter (unique across processes)"""
        return await asyncio.to_thread(self._next_sequence)

    def _insert(self, owner_id: str, destination_url: str, code: str) -> ShortLink:
        link = ShortLink(code=code, owner_id=owner_id, destination_url=destination_url)
        try:
            with store_operation(self.db, "create short link"):
                self.db.add(link)
                self.db.commit()
                self.db.refresh(link)
        except IntegrityError as e:
            if self._code_taken(code):
                raise ConflictError(f"Short code '{code}' is already taken")
            logger.error("Integrity failure creating %s for %s: %s", code, owner_id, e)
            raise InternalError("Could not create short link") from e
        return link

    def _lookup(self, code: str) -> Optional[str]:
        with store_operation(self.db, "resolve short link"):
            return (
                self.db.query(ShortLink.destination_url)
                .filter(ShortLink.code == code)
                .scalar()
            )

    def _list_by_owner(self, owner_id: str) -> List[ShortLink]:
        with store_operation(self.db, "list short links"):
            return (
                self.db.query(ShortLink)
                .filter(ShortLink.owner_id == owner_id)
                .order_by(ShortLink.created_at.desc(), ShortLink.id.desc())
                .all()
            )

    def _next_sequence(self) -> int:
        row = CodeSequence()
        with store_operation(self.db, "draw code sequence"):
            self.db.add(row)
            self.db.commit()
            return row.id

    def _code_taken(self, code: str) -> bool:
        with store_operation(self.db, "check short code"):
            return self.db.query(ShortLink.id).filter(ShortLink.code == code).first() is not None

    @staticmethod
    def _cache_key(code: str) -> str:
        return f"url:{code}"
