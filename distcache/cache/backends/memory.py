"""
distcache — Memory Cache Backend

Dictionary-backed stand-in for the Redis backend, used for deterministic
tests without a network dependency.

The store is owned by the caller (pass one in to share it, or let the
backend create a fresh dict). Each key holds either a ScalarEntry or a
CollectionEntry. Scalars and rows are both kept as JSON text so typed reads
behave exactly like the Redis backend. No locking: single-threaded use only.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, TypeVar

from .. import serialization
from ..interface import CacheProvider

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class ScalarEntry:
    """A single serialized value."""

    payload: str


@dataclass
class CollectionEntry:
    """A collection: entry key -> serialized row."""

    rows: dict[str, str] = field(default_factory=dict)


MemoryStore = dict[str, ScalarEntry | CollectionEntry]


class MemoryCacheBackend(CacheProvider):
    """
    In-memory cache backend.

    Features:
    - Same contract and JSON round-trip as RedisCacheBackend
    - Caller-controlled store lifetime (no module-level state)
    - Empty collections are dropped from the store
    """

    def __init__(self, store: MemoryStore | None = None) -> None:
        """
        Initialize memory cache backend.

        Args:
            store: Mapping to use as storage; a new empty dict when omitted
        """
        self._store: MemoryStore = store if store is not None else {}

        # Stats
        self._hits = 0
        self._misses = 0
        self._sets = 0
        self._deletes = 0

    def _collection(self, collection_key: str) -> CollectionEntry | None:
        entry = self._store.get(collection_key)
        if isinstance(entry, CollectionEntry):
            return entry
        return None

    def _drop_if_empty(self, collection_key: str, collection: CollectionEntry) -> None:
        if not collection.rows:
            del self._store[collection_key]
            logger.debug(f"Removed empty collection '{collection_key}'")

    def _decode(self, payload: str | None, model: Any) -> Any | None:
        if payload is None:
            self._misses += 1
            return None
        self._hits += 1
        return serialization.loads(payload, model)

    # ------------ Scalar entries ------------

    async def set(self, key: str, value: Any) -> None:
        """Store a scalar value, replacing any entry at ``key``."""
        self._store[key] = ScalarEntry(serialization.dumps(value))
        self._sets += 1

    async def get(self, key: str, model: type[T] | Any = None) -> T | Any | None:
        """Retrieve a scalar value; collections read as absent."""
        entry = self._store.get(key)
        payload = entry.payload if isinstance(entry, ScalarEntry) else None
        return self._decode(payload, model)

    async def delete(self, key: str) -> bool:
        """Delete key from cache."""
        if self._store.pop(key, None) is None:
            return False
        self._deletes += 1
        return True

    async def exists(self, key: str) -> bool:
        """Check if key exists."""
        return key in self._store

    async def get_keys(self, pattern: str) -> list[str]:
        """Keys starting with ``pattern``, in insertion order."""
        return [key for key in self._store if key.startswith(pattern)]

    # ------------ Collections ------------

    async def get_length(self, collection_key: str) -> int:
        """Row count, 1 for a scalar, 0 when absent."""
        entry = self._store.get(collection_key)
        if isinstance(entry, CollectionEntry):
            return len(entry.rows)
        if isinstance(entry, ScalarEntry):
            return 1
        return 0

    async def set_row(self, collection_key: str, entry_key: str, value: Any) -> bool:
        """Insert or overwrite one row, creating the collection if needed."""
        await self.set_rows(collection_key, {entry_key: value})
        return True

    async def set_rows(self, collection_key: str, entries: Mapping[str, Any]) -> None:
        """Merge ``entries`` into the collection; a scalar at the key is replaced."""
        # Encode everything first so a bad value leaves the store untouched
        rows = {entry_key: serialization.dumps(value) for entry_key, value in entries.items()}
        if not rows:
            return

        collection = self._collection(collection_key)
        if collection is None:
            collection = CollectionEntry()
            self._store[collection_key] = collection

        collection.rows.update(rows)
        self._sets += len(rows)

    async def read_row(self, collection_key: str, entry_key: str, model: type[T] | Any = None) -> T | Any | None:
        """Read one row."""
        collection = self._collection(collection_key)
        payload = collection.rows.get(entry_key) if collection is not None else None
        return self._decode(payload, model)

    async def read_rows(
        self,
        collection_key: str,
        entry_keys: Iterable[str] | None = None,
        model: type[T] | Any = None,
    ) -> list[T] | list[Any]:
        """Read the requested rows (all rows when ``entry_keys`` is None)."""
        collection = self._collection(collection_key)
        if collection is None:
            return []

        if entry_keys is None:
            payloads = list(collection.rows.values())
        else:
            payloads = [collection.rows[k] for k in entry_keys if k in collection.rows]

        values = []
        for payload in payloads:
            value = self._decode(payload, model)
            if value is not None:
                values.append(value)
        return values

    async def exists_row(self, collection_key: str, entry_key: str) -> bool:
        """Check if the row exists inside the collection."""
        collection = self._collection(collection_key)
        return collection is not None and entry_key in collection.rows

    async def delete_row(self, collection_key: str, entry_key: str) -> bool:
        """Delete one row, dropping the collection once it is empty."""
        collection = self._collection(collection_key)
        if collection is None or collection.rows.pop(entry_key, None) is None:
            return False

        self._deletes += 1
        self._drop_if_empty(collection_key, collection)
        return True

    async def delete_rows(self, collection_key: str, entry_keys: Iterable[str]) -> int:
        """Delete several rows; the collection is dropped once it is empty."""
        collection = self._collection(collection_key)
        if collection is None:
            return 0

        removed = 0
        for entry_key in entry_keys:
            if collection.rows.pop(entry_key, None) is not None:
                removed += 1

        self._deletes += removed
        self._drop_if_empty(collection_key, collection)
        return removed

    async def delete_row_set(self, collection_key: str, entry_keys: Iterable[str]) -> bool:
        """Not supported in memory; use delete_rows."""
        raise NotImplementedError("delete_row_set is only supported by the redis backend")

    # ------------ Health & lifecycle ------------

    async def ping(self) -> timedelta:
        """Time a lookup in the local store."""
        start = time.perf_counter()
        _ = len(self._store)
        elapsed = time.perf_counter() - start
        # perf_counter can report 0 for a no-op on coarse clocks
        return max(timedelta(seconds=elapsed), timedelta(microseconds=1))

    async def get_stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        total_requests = self._hits + self._misses
        hit_rate = (self._hits / total_requests * 100) if total_requests > 0 else 0.0

        return {
            "backend": "memory",
            "size": len(self._store),
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(hit_rate, 2),
            "sets": self._sets,
            "deletes": self._deletes,
        }

    async def close(self) -> None:
        """Nothing to release; the store belongs to the caller."""
        logger.debug("Memory cache backend closed")
