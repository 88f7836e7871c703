"""
distcache — Cache Module

Cache providers with two interchangeable backends (redis, memory).

Usage:
    from distcache.cache import create_cache

    cache = create_cache()
    await cache.set("key", {"value": 1})
    await cache.set_row("users", "42", {"name": "Ada"})
    names = await cache.read_rows("users")
"""

from .factory import (
    close_all_caches,
    create_cache,
    get_cache,
    list_cache_instances,
    reset_cache_factory,
)
from .interface import CacheProvider

__all__ = [
    # Factory functions
    "create_cache",
    "get_cache",
    "close_all_caches",
    "list_cache_instances",
    "reset_cache_factory",
    # Interface
    "CacheProvider",
]
