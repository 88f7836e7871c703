"""
distcache — Cache Factory

Builds cache providers from configuration and keeps a registry of named
instances.

- Select backend with CACHE_BACKEND=memory|redis (memory by default,
  redis when REDIS_URL is set)
- The redis backend module is imported only when selected

Examples:
    from distcache.cache import create_cache

    cache = create_cache()

    from distcache.config import CacheBackend, CacheConfig
    cfg = CacheConfig(backend=CacheBackend.REDIS, redis_url="redis://localhost:6379/0")
    redis_cache = create_cache(cfg, name="shared")
"""

from __future__ import annotations

import logging

from ..config import CacheBackend, CacheConfig, get_config
from ..errors import ConfigurationError
from .backends.memory import MemoryCacheBackend
from .interface import CacheProvider

logger = logging.getLogger(__name__)

_cache_instances: dict[str, CacheProvider] = {}


def _create_memory_cache(config: CacheConfig) -> CacheProvider:
    """Internal helper to construct a memory cache backend."""
    return MemoryCacheBackend()


def _create_redis_cache(config: CacheConfig) -> CacheProvider:
    """Internal helper to construct a redis cache backend with lazy import."""
    if not config.redis_url:
        raise ConfigurationError(
            "REDIS_URL must be set when CACHE_BACKEND=redis",
            details={"env": "REDIS_URL", "backend": "redis"},
        )

    try:
        from .backends.redis import RedisCacheBackend
    except ImportError as e:
        logger.error(
            "Redis backend selected but redis client is not installed",
            extra={"package": "redis>=5.0.0", "error": str(e)},
        )
        raise ConfigurationError(
            "Redis backend selected but redis client is unavailable. "
            "Install with: pip install 'redis>=5.0.0' or add to dependencies.",
            details={"package": "redis>=5.0.0", "error": str(e), "backend": "redis"},
        ) from e

    return RedisCacheBackend(
        redis_url=config.redis_url,
        namespace=config.namespace,
        max_connections=config.redis_max_connections,
        socket_timeout=config.redis_socket_timeout,
        scan_count=config.scan_count,
    )


def create_cache(
    config: CacheConfig | None = None,
    name: str = "default",
) -> CacheProvider:
    """
    Create a cache provider based on configuration.

    Args:
        config: Cache configuration (uses global config if not provided)
        name: Instance name; an existing instance with this name is returned

    Returns:
        Configured cache provider

    Raises:
        ConfigurationError: If cache configuration is invalid or backend unavailable
    """
    if name in _cache_instances:
        logger.debug("Returning existing cache instance: %s", name)
        return _cache_instances[name]

    if config is None:
        config = get_config().cache

    backend = CacheBackend(config.backend)
    logger.info(
        "Creating cache instance '%s' with backend: %s",
        name,
        backend.value,
        extra={"cache_name": name, "backend": backend.value},
    )

    if backend == CacheBackend.MEMORY:
        cache = _create_memory_cache(config)
    elif backend == CacheBackend.REDIS:
        cache = _create_redis_cache(config)
    else:  # pragma: no cover
        raise ConfigurationError(
            f"Unknown cache backend: {backend}",
            details={"backend": str(backend), "supported": ["memory", "redis"]},
        )

    _cache_instances[name] = cache
    return cache


def get_cache(name: str = "default") -> CacheProvider:
    """
    Get an existing cache instance by name, creating it from the global
    configuration if needed.
    """
    if name not in _cache_instances:
        logger.debug("Cache instance '%s' not found, creating new instance", name)
        return create_cache(name=name)

    return _cache_instances[name]


async def close_all_caches() -> None:
    """
    Close all cache instances and release resources.

    Call during graceful shutdown.
    """
    if not _cache_instances:
        logger.debug("No cache instances to close")
        return

    logger.info("Closing %d cache instance(s)...", len(_cache_instances))

    for name, cache in list(_cache_instances.items()):
        try:
            await cache.close()
            logger.info("Closed cache instance: %s", name)
        except Exception as e:
            # Keep closing the others
            logger.error(
                "Error closing cache instance '%s': %s",
                name,
                e,
                extra={"cache_name": name, "error": str(e)},
                exc_info=True,
            )

    _cache_instances.clear()
    logger.info("All cache instances closed")


def reset_cache_factory() -> None:
    """
    Drop all instance references without closing them.

    Only use this in tests; close_all_caches() is the proper shutdown.
    """
    count = len(_cache_instances)
    _cache_instances.clear()
    logger.debug("Reset cache factory, cleared %d instance reference(s)", count)


def list_cache_instances() -> list[str]:
    """List all registered cache instance names."""
    return list(_cache_instances.keys())
