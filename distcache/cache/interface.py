"""
distcache — Cache Provider Interface

Defines the abstract contract that every cache backend implements.

Two kinds of data live in one flat key space:
- scalar entries: key -> serialized value
- collections: key -> mapping of entry key -> serialized value ("rows")

A collection whose last row is deleted disappears from the key space.
"""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Iterable, Mapping
from datetime import timedelta
from typing import Any, TypeVar

T = TypeVar("T")


class CacheProvider(ABC):
    """
    Abstract base class for cache backends.

    Typed reads accept an optional ``model`` (any type pydantic can
    validate, e.g. ``int``, ``set[str]`` or a BaseModel subclass). Without
    it the plain decoded JSON value is returned. Missing keys and
    undecodable payloads read as None.
    """

    # ------------ Scalar entries ------------

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """
        Store a value, replacing whatever was at ``key`` (collections included).

        Args:
            key: Cache key
            value: Value to cache (must be JSON serializable)
        """

    @abstractmethod
    async def get(self, key: str, model: type[T] | Any = None) -> T | Any | None:
        """
        Retrieve a value from the cache.

        Args:
            key: Cache key
            model: Optional type to validate the stored value as

        Returns:
            Cached value if found and decodable, None otherwise
        """

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """
        Delete a key from the cache.

        Returns:
            True if key was deleted, False if key didn't exist
        """

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check if a key exists in the cache."""

    @abstractmethod
    async def get_keys(self, pattern: str) -> list[str]:
        """
        List every key starting with ``pattern`` (ordinal, case-sensitive).

        No ordering is guaranteed.
        """

    async def delete_all(self, pattern: str) -> None:
        """
        Delete every key starting with ``pattern``.

        Keys are enumerated first and then deleted one by one; the operation
        is not atomic.
        """
        for key in await self.get_keys(pattern):
            await self.delete(key)

    # ------------ Collections ------------

    @abstractmethod
    async def get_length(self, collection_key: str) -> int:
        """
        Number of rows stored under ``collection_key``.

        Returns:
            Row count for a collection, 1 for a scalar entry, 0 if absent
        """

    @abstractmethod
    async def set_row(self, collection_key: str, entry_key: str, value: Any) -> bool:
        """
        Insert or overwrite one row, creating the collection if needed.

        Returns:
            True if the row was written
        """

    @abstractmethod
    async def set_rows(self, collection_key: str, entries: Mapping[str, Any]) -> None:
        """
        Write every entry of ``entries`` into the collection in one call.

        Existing rows with other entry keys are kept.
        """

    @abstractmethod
    async def read_row(self, collection_key: str, entry_key: str, model: type[T] | Any = None) -> T | Any | None:
        """Read one row, or None if the collection or the row is absent."""

    @abstractmethod
    async def read_rows(
        self,
        collection_key: str,
        entry_keys: Iterable[str] | None = None,
        model: type[T] | Any = None,
    ) -> list[T] | list[Any]:
        """
        Read rows of a collection.

        Args:
            collection_key: Collection to read
            entry_keys: Rows to read; None reads all of them
            model: Optional type to validate each row as

        Returns:
            Values of the rows found. Requested keys that are missing are
            skipped, not reported.
        """

    @abstractmethod
    async def exists_row(self, collection_key: str, entry_key: str) -> bool:
        """Check if ``entry_key`` is present inside the collection."""

    @abstractmethod
    async def delete_row(self, collection_key: str, entry_key: str) -> bool:
        """
        Delete one row.

        Returns:
            True if the row existed and was removed
        """

    @abstractmethod
    async def delete_rows(self, collection_key: str, entry_keys: Iterable[str]) -> int:
        """
        Delete several rows, one at a time.

        Returns:
            Number of rows actually removed
        """

    @abstractmethod
    async def delete_row_set(self, collection_key: str, entry_keys: Iterable[str]) -> bool:
        """
        Delete several rows with a single backend command.

        Returns:
            True if at least one row was removed
        """

    async def refresh(
        self,
        collection_key: str,
        producer: Callable[[], Awaitable[list[T]] | list[T]],
        get_id: Callable[[T], str],
    ) -> None:
        """
        Rebuild a collection from freshly produced items.

        ``producer`` is called (and awaited if it returns an awaitable) before
        anything is touched. The collection is then deleted and rewritten with
        each item keyed by ``get_id(item)``. Readers running between the
        delete and the rewrite see the collection as absent.
        """
        items = producer()
        if inspect.isawaitable(items):
            items = await items

        await self.delete(collection_key)

        entries = {get_id(item): item for item in items}
        if entries:
            await self.set_rows(collection_key, entries)

    # ------------ Health & lifecycle ------------

    @abstractmethod
    async def ping(self) -> timedelta:
        """Measure a round trip to the backend."""

    @abstractmethod
    async def get_stats(self) -> dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Dictionary with cache statistics (hits, misses, sets, deletes, ...)
        """

    @abstractmethod
    async def close(self) -> None:
        """
        Close the cache backend and release resources.

        Should be called during graceful shutdown.
        """
