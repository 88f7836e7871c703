"""
distcache — Cache Factory Integration Tests

Tests for the cache factory that creates and manages cache instances.
"""

from collections.abc import AsyncGenerator

import pytest

from distcache.cache.backends.memory import MemoryCacheBackend
from distcache.cache.backends.redis import RedisCacheBackend
from distcache.cache.factory import (
    close_all_caches,
    create_cache,
    get_cache,
    list_cache_instances,
    reset_cache_factory,
)
from distcache.cache.interface import CacheProvider
from distcache.config import CacheBackend, CacheConfig
from distcache.errors import ConfigurationError


class TestCacheFactory:
    """Test suite for cache factory functionality."""

    @pytest.fixture(autouse=True)
    async def cleanup(self) -> AsyncGenerator[None, None]:
        """Clean up cache instances after each test."""
        yield
        await close_all_caches()
        reset_cache_factory()

    async def test_create_memory_cache_default(self, mock_env_memory: None) -> None:
        """Memory is the default backend."""
        cache = create_cache()

        assert isinstance(cache, CacheProvider)
        assert isinstance(cache, MemoryCacheBackend)

        await cache.set("test_key", "test_value")
        assert await cache.get("test_key") == "test_value"

    async def test_create_memory_cache_explicit_config(self) -> None:
        config = CacheConfig(backend=CacheBackend.MEMORY)

        cache = create_cache(config=config, name="custom")

        await cache.set_row("c", "e", 123)
        assert await cache.read_row("c", "e", int) == 123

    async def test_create_redis_cache_from_env(self, mock_env_redis: None) -> None:
        """Redis is selected from the environment; no command is sent yet."""
        cache = create_cache()

        assert isinstance(cache, RedisCacheBackend)
        assert cache.namespace == "test"

    async def test_create_redis_cache_without_url(self) -> None:
        """A config built without validation still can't produce a redis backend."""
        config = CacheConfig.model_construct(backend=CacheBackend.REDIS, redis_url=None)

        with pytest.raises(ConfigurationError):
            create_cache(config=config, name="broken")

        assert "broken" not in list_cache_instances()

    async def test_same_name_returns_same_instance(self) -> None:
        first = create_cache(CacheConfig(), name="shared")
        second = create_cache(CacheConfig(), name="shared")

        assert first is second

    async def test_get_cache_creates_on_demand(self, mock_env_memory: None) -> None:
        cache = get_cache("lazy")

        assert get_cache("lazy") is cache
        assert "lazy" in list_cache_instances()

    async def test_instances_are_isolated(self) -> None:
        """Different names get different stores."""
        first = create_cache(CacheConfig(), name="one")
        second = create_cache(CacheConfig(), name="two")

        await first.set("key", 1)

        assert await second.exists("key") is False

    async def test_close_all_caches_clears_registry(self) -> None:
        create_cache(CacheConfig(), name="a")
        create_cache(CacheConfig(), name="b")

        await close_all_caches()

        assert list_cache_instances() == []
