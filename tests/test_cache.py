"""
Tests for lookup cache strategies.
"""
from unittest.mock import MagicMock, patch

import redis

from shortlink_app.cache.factory import CacheBackend, CacheFactory
from shortlink_app.cache.strategies import InMemoryCache, NullCache, RedisCache
from tests.conftest import run


class TestInMemoryCache:

    def test_set_get_delete(self):
        cache = InMemoryCache()

        run(cache.set("url:abc", "https://example.com"))
        assert run(cache.get("url:abc")) == "https://example.com"

        assert run(cache.delete("url:abc")) is True
        assert run(cache.get("url:abc")) is None

    def test_expired_entry_is_a_miss(self):
        cache = InMemoryCache()

        run(cache.set("url:abc", "https://example.com", ttl=0))

        assert run(cache.get("url:abc")) is None

    def test_clear(self):
        cache = InMemoryCache()
        run(cache.set("a", "1"))
        run(cache.set("b", "2"))

        run(cache.clear())

        assert run(cache.get("a")) is None
        assert run(cache.get("b")) is None


class TestNullCache:

    def test_always_misses(self):
        cache = NullCache()

        run(cache.set("url:abc", "https://example.com"))

        assert run(cache.get("url:abc")) is None


class TestRedisCache:

    def test_prefixes_keys(self):
        client = MagicMock()
        client.get.return_value = b"https://example.com"
        cache = RedisCache(client)

        assert run(cache.get("url:abc")) == "https://example.com"
        client.get.assert_called_once_with("shortlink:url:abc")

        run(cache.set("url:abc", "https://example.com", ttl=60))
        client.setex.assert_called_once_with("shortlink:url:abc", 60, "https://example.com")

    def test_errors_degrade_to_miss(self):
        client = MagicMock()
        client.get.side_effect = redis.ConnectionError("down")
        client.setex.side_effect = redis.ConnectionError("down")
        cache = RedisCache(client)

        assert run(cache.get("url:abc")) is None
        assert run(cache.set("url:abc", "https://example.com")) is False


class TestCacheFactory:

    def setup_method(self):
        CacheFactory.clear_instance()

    def teardown_method(self):
        CacheFactory.clear_instance()

    def test_memory_backend_is_singleton(self):
        first = CacheFactory.create(CacheBackend.MEMORY)

        assert isinstance(first, InMemoryCache)
        assert CacheFactory.create(CacheBackend.MEMORY) is first

    def test_null_backend(self):
        assert isinstance(CacheFactory.create(CacheBackend.NULL), NullCache)

    def test_unreachable_redis_falls_back_to_memory(self):
        client = MagicMock()
        client.ping.side_effect = redis.ConnectionError("refused")

        with patch("redis.from_url", return_value=client):
            cache = CacheFactory.create(CacheBackend.REDIS)

        assert isinstance(cache, InMemoryCache)
