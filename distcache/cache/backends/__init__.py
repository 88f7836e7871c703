"""
distcache — Cache Backends

Exports available cache backend implementations.

Redis backend is lazy-loaded via factory.py to avoid import overhead.
"""

from .memory import CollectionEntry, MemoryCacheBackend, MemoryStore, ScalarEntry

__all__ = [
    "MemoryCacheBackend",
    "MemoryStore",
    "ScalarEntry",
    "CollectionEntry",
]
