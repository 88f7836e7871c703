"""
distcache — Distributed Cache Providers

Set/get/delete of single values and of rows inside named collections,
backed by Redis in production and by a dictionary in tests.
"""

__version__ = "1.0.0"

from .cache import CacheProvider, close_all_caches, create_cache, get_cache
from .errors import (
    CacheConnectionError,
    CacheError,
    CacheOperationError,
    CacheSerializationError,
    ConfigurationError,
    DistCacheError,
)

__all__ = [
    "CacheProvider",
    "create_cache",
    "get_cache",
    "close_all_caches",
    "DistCacheError",
    "CacheError",
    "CacheConnectionError",
    "CacheOperationError",
    "CacheSerializationError",
    "ConfigurationError",
]
