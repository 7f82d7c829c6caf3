"""
Factory for creating cache instances.
Creates one instance per process and reuses it.
"""

import logging
from enum import Enum
from typing import Optional

from .strategies import CacheStrategy, RedisCache, InMemoryCache, NullCache
from shortlink_app.config import settings

logger = logging.getLogger(__name__)


class CacheBackend(Enum):
    """Available cache backends"""
    REDIS = "redis"
    MEMORY = "memory"
    NULL = "null"


class CacheFactory:
    """
    Factory for the lookup cache. Configuration comes from settings.
    """

    _instance: Optional[CacheStrategy] = None

    @classmethod
    def create(cls, backend: CacheBackend) -> CacheStrategy:
        """
        Create or return the cached cache instance.

        Redis falls back to the in-memory cache when it cannot be reached
        at startup.
        """
        if cls._instance is not None:
            return cls._instance

        if backend == CacheBackend.REDIS:
            import redis

            try:
                redis_client = redis.from_url(
                    settings.redis_url,
                    decode_responses=False,
                    socket_connect_timeout=settings.store_timeout_seconds,
                    socket_timeout=settings.store_timeout_seconds,
                )
                redis_client.ping()
                cls._instance = RedisCache(redis_client)
                logger.info("Redis cache initialized at %s", settings.redis_url)

            except redis.RedisError as e:
                logger.warning("Redis connection failed (%s); falling back to in-memory cache", e)
                cls._instance = InMemoryCache()

        elif backend == CacheBackend.MEMORY:
            cls._instance = InMemoryCache()
            logger.info("In-memory cache initialized")

        elif backend == CacheBackend.NULL:
            cls._instance = NullCache()
            logger.info("Null cache initialized")

        else:
            raise ValueError(f"Unknown cache backend: {backend}")

        return cls._instance

    @classmethod
    def clear_instance(cls):
        """Clear cached instance (for testing)"""
        cls._instance = None
