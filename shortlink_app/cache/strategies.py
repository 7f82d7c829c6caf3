"""
Cache strategies for short code lookups.
Allows switching between different cache backends (Redis, In-Memory, Null).

The cache is never the source of truth: a miss or a backend error only
means the registry is asked instead.
"""

import asyncio
import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Dict, Optional, Tuple

import redis

logger = logging.getLogger(__name__)


class CacheStrategy(ABC):
    """
    Abstract base class for cache strategies.

    All methods are async because cache operations involve I/O (network for Redis).
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """
        Get value from cache.

        Returns:
            Cached value or None if not found
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: str, ttl: int = 3600) -> bool:
        """
        Set value in cache with TTL (Time To Live) in seconds.

        Returns:
            True if successful, False otherwise
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete key from cache"""
        pass

    @abstractmethod
    async def clear(self) -> bool:
        """Clear all cache entries"""
        pass


class RedisCache(CacheStrategy):
    """
    Redis cache implementation.

    Shared between workers and processes. The client is synchronous, so
    calls run in a worker thread. Errors are logged and reported as a miss
    so a Redis outage degrades to registry lookups.
    """

    def __init__(self, redis_client, prefix: str = "shortlink:"):
        """
        Args:
            redis_client: Redis client instance (redis.Redis)
            prefix: Namespace prepended to every key
        """
        self.redis = redis_client
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    async def get(self, key: str) -> Optional[str]:
        try:
            value = await asyncio.to_thread(self.redis.get, self._key(key))
            return value.decode("utf-8") if value else None
        except redis.RedisError as e:
            logger.warning("Redis get error for %s: %s", key, e)
            return None

    async def set(self, key: str, value: str, ttl: int = 3600) -> bool:
        try:
            return bool(await asyncio.to_thread(self.redis.setex, self._key(key), ttl, value))
        except redis.RedisError as e:
            logger.warning("Redis set error for %s: %s", key, e)
            return False

    async def delete(self, key: str) -> bool:
        try:
            return bool(await asyncio.to_thread(self.redis.delete, self._key(key)))
        except redis.RedisError as e:
            logger.warning("Redis delete error for %s: %s", key, e)
            return False

    async def clear(self) -> bool:
        try:
            await asyncio.to_thread(self._clear_prefix)
            return True
        except redis.RedisError as e:
            logger.warning("Redis clear error: %s", e)
            return False

    def _clear_prefix(self) -> None:
        keys = list(self.redis.scan_iter(match=f"{self.prefix}*"))
        if keys:
            self.redis.delete(*keys)


class InMemoryCache(CacheStrategy):
    """
    In-memory cache using a dict guarded by a lock.

    Not shared between processes. Expired entries are dropped lazily on read.
    """

    def __init__(self):
        self._cache: Dict[str, Tuple[str, float]] = {}
        self._lock = threading.Lock()

    async def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if expires_at <= time.monotonic():
                del self._cache[key]
                return None
            return value

    async def set(self, key: str, value: str, ttl: int = 3600) -> bool:
        with self._lock:
            self._cache[key] = (value, time.monotonic() + ttl)
        return True

    async def delete(self, key: str) -> bool:
        with self._lock:
            return self._cache.pop(key, None) is not None

    async def clear(self) -> bool:
        with self._lock:
            self._cache.clear()
        return True


class NullCache(CacheStrategy):
    """
    Null Object Pattern - cache that does nothing.
    Every lookup is a miss.
    """

    async def get(self, key: str) -> Optional[str]:
        return None

    async def set(self, key: str, value: str, ttl: int = 3600) -> bool:
        return True

    async def delete(self, key: str) -> bool:
        return True

    async def clear(self) -> bool:
        return True
