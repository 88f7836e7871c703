"""
distcache — Redis Cache Backend

Asynchronous Redis cache implementation with:
- JSON serialization for scalar values and hash fields
- Collections stored as Redis hashes (HSET/HGET/HDEL...)
- Optional namespace prefixing for safe multi-tenant usage
- Prefix enumeration through SCAN

Requires: redis>=5.0 with asyncio support

Example:
    cache = RedisCacheBackend(redis_url="redis://localhost:6379/0", namespace="app")
    await cache.set_row("users", "42", {"name": "Ada"})
    user = await cache.read_row("users", "42")
"""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from datetime import timedelta
from typing import Any, TypeVar

from ...errors import CacheConnectionError, CacheOperationError
from .. import serialization
from ..interface import CacheProvider

logger = logging.getLogger(__name__)

try:
    # redis-py asyncio client (v5+)
    from redis.asyncio import Redis
    from redis.exceptions import ConnectionError as RedisConnectionError
    from redis.exceptions import RedisError
    from redis.exceptions import TimeoutError as RedisTimeoutError
except ImportError as e:  # pragma: no cover
    raise ImportError(
        "Redis async client is required but not installed. "
        "Install with: pip install 'redis>=5.0.0' or add 'redis' to your dependencies."
    ) from e

T = TypeVar("T")

_GLOB_SPECIAL = re.compile(r"([\\*?\[\]])")


def _escape_glob(text: str) -> str:
    """Escape glob metacharacters so SCAN MATCH treats ``text`` literally."""
    return _GLOB_SPECIAL.sub(r"\\\1", text)


def _as_str(value: str | bytes) -> str:
    return value.decode("utf-8") if isinstance(value, bytes) else value


class RedisConnectionFactory:
    """
    Lazily builds and owns a redis.asyncio client.

    The client connects on its first command, so creating the factory never
    touches the network.
    """

    def __init__(
        self,
        redis_url: str,
        max_connections: int = 10,
        socket_timeout: int = 5,
        decode_responses: bool = True,
    ) -> None:
        """
        Args:
            redis_url: Connection URL, e.g., redis://localhost:6379/0 or rediss:// for TLS
            max_connections: Connection pool size
            socket_timeout: Socket timeout in seconds
            decode_responses: If True, values returned as str, not bytes
        """
        if not redis_url:
            raise ValueError("redis_url is required")

        self.redis_url = redis_url
        self.max_connections = max_connections
        self.socket_timeout = socket_timeout
        self.decode_responses = decode_responses
        self._client: Redis | None = None

    def get_database(self) -> Redis:
        """Return the shared client, creating it on first use."""
        if self._client is None:
            self._client = Redis.from_url(  # type: ignore[call-overload]
                url=self.redis_url,
                decode_responses=self.decode_responses,
                max_connections=self.max_connections,
                socket_timeout=self.socket_timeout,
            )
        return self._client

    async def close(self) -> None:
        """Close the client and disconnect its pool."""
        if self._client is None:
            return

        client, self._client = self._client, None
        try:
            await client.aclose()
        except RedisError as e:
            logger.error(f"Error closing Redis client: {e}", extra={"error": str(e)}, exc_info=True)
        finally:
            try:
                await client.connection_pool.disconnect()
            except RedisError as e:
                logger.warning(f"Error disconnecting Redis connection pool: {e}", extra={"error": str(e)})


class RedisCacheBackend(CacheProvider):
    """
    Redis cache backend.

    Notes:
    - Scalars are Redis strings, collections are Redis hashes.
    - Values are stored as UTF-8 JSON strings.
    - Redis drops a hash when its last field is deleted, so empty
      collections never linger.
    - Transport failures raise CacheConnectionError, rejected commands
      (e.g. WRONGTYPE) raise CacheOperationError. Nothing is retried.
    """

    def __init__(
        self,
        connection_factory: RedisConnectionFactory | None = None,
        *,
        client: Redis | None = None,
        redis_url: str | None = None,
        namespace: str = "",
        max_connections: int = 10,
        socket_timeout: int = 5,
        scan_count: int = 250,
    ) -> None:
        """
        Initialize Redis cache backend.

        Exactly one of ``connection_factory``, ``client`` or ``redis_url``
        supplies the connection. A factory built from ``redis_url`` is owned
        by the backend and closed by close(); injected ones are not.

        Args:
            connection_factory: Factory providing get_database()
            client: Ready redis.asyncio client
            redis_url: Connection URL used to build a private factory
            namespace: Prefix for all keys ("" = no prefix)
            max_connections: Pool size when building from redis_url
            socket_timeout: Socket timeout when building from redis_url
            scan_count: COUNT hint for SCAN
        """
        self._owned_factory: RedisConnectionFactory | None = None
        if client is None:
            if connection_factory is None:
                if not redis_url:
                    raise ValueError("one of connection_factory, client or redis_url is required")
                connection_factory = RedisConnectionFactory(
                    redis_url,
                    max_connections=max_connections,
                    socket_timeout=socket_timeout,
                )
                self._owned_factory = connection_factory
            client = connection_factory.get_database()

        self._client = client
        self.namespace = namespace.strip()
        self.scan_count = scan_count
        self._hits = 0
        self._misses = 0
        self._sets = 0
        self._deletes = 0

    # ------------ Helpers ------------

    def _make_key(self, key: str) -> str:
        """Create namespaced key."""
        return f"{self.namespace}:{key}" if self.namespace else key

    def _strip_key(self, key: str) -> str:
        """Remove the namespace prefix from a stored key."""
        if self.namespace:
            return key[len(self.namespace) + 1 :]
        return key

    @contextmanager
    def _errors(self, operation: str, key: str | None = None) -> Iterator[None]:
        """Translate redis exceptions into cache errors."""
        details = {"operation": operation, "key": key, "namespace": self.namespace}
        try:
            yield
        except (RedisConnectionError, RedisTimeoutError) as e:
            logger.error(
                f"Redis unavailable during {operation} on '{key}': {e}",
                extra={**details, "error": str(e)},
                exc_info=True,
            )
            raise CacheConnectionError("redis", details={**details, "error": str(e)}) from e
        except RedisError as e:
            logger.error(
                f"Redis {operation} failed on '{key}': {e}",
                extra={**details, "error": str(e)},
                exc_info=True,
            )
            raise CacheOperationError(
                f"Redis {operation} failed on '{key}': {e}",
                details={**details, "error": str(e)},
            ) from e

    def _decode(self, data: str | bytes | None, model: Any) -> Any | None:
        if data is None:
            self._misses += 1
            return None
        self._hits += 1
        return serialization.loads(data, model)

    # ------------ Scalar entries ------------

    async def set(self, key: str, value: Any) -> None:
        """Store a value with SET."""
        payload = serialization.dumps(value)
        with self._errors("set", key):
            await self._client.set(self._make_key(key), payload)
        self._sets += 1

    async def get(self, key: str, model: type[T] | Any = None) -> T | Any | None:
        """Retrieve a value with GET."""
        with self._errors("get", key):
            data = await self._client.get(self._make_key(key))
        return self._decode(data, model)

    async def delete(self, key: str) -> bool:
        """Delete a single key."""
        with self._errors("delete", key):
            deleted = await self._client.delete(self._make_key(key))
        if deleted:
            self._deletes += 1
        return bool(deleted)

    async def exists(self, key: str) -> bool:
        """Check if a key exists."""
        with self._errors("exists", key):
            return bool(await self._client.exists(self._make_key(key)))

    async def get_keys(self, pattern: str) -> list[str]:
        """
        Enumerate keys starting with ``pattern``.

        Implementation: SCAN MATCH "<namespace>:<pattern>*" with glob
        characters escaped. SCAN may repeat keys, duplicates are dropped.
        """
        match = _escape_glob(self._make_key(pattern)) + "*"
        keys: dict[str, None] = {}
        with self._errors("scan", pattern):
            async for raw in self._client.scan_iter(match=match, count=self.scan_count):
                keys[self._strip_key(_as_str(raw))] = None
        return list(keys)

    async def delete_all(self, pattern: str) -> None:
        """Delete every key starting with ``pattern``, one DEL per key."""
        keys = await self.get_keys(pattern)
        for key in keys:
            await self.delete(key)
        logger.info(
            f"Deleted {len(keys)} keys matching prefix '{pattern}'",
            extra={"pattern": pattern, "namespace": self.namespace, "key_count": len(keys)},
        )

    # ------------ Collections (hashes) ------------

    async def get_length(self, collection_key: str) -> int:
        """HLEN for hashes, 1 for any other existing key, 0 when absent."""
        ns_key = self._make_key(collection_key)
        with self._errors("get_length", collection_key):
            key_type = _as_str(await self._client.type(ns_key))
            if key_type == "none":
                return 0
            if key_type == "hash":
                return int(await self._client.hlen(ns_key))
        return 1

    async def set_row(self, collection_key: str, entry_key: str, value: Any) -> bool:
        """Write one hash field with HSET."""
        payload = serialization.dumps(value)
        with self._errors("set_row", collection_key):
            await self._client.hset(self._make_key(collection_key), entry_key, payload)
        self._sets += 1
        return True

    async def set_rows(self, collection_key: str, entries: Mapping[str, Any]) -> None:
        """Write all fields with a single HSET; other fields are kept."""
        rows = {entry_key: serialization.dumps(value) for entry_key, value in entries.items()}
        if not rows:
            return

        with self._errors("set_rows", collection_key):
            await self._client.hset(self._make_key(collection_key), mapping=rows)
        self._sets += len(rows)

    async def read_row(self, collection_key: str, entry_key: str, model: type[T] | Any = None) -> T | Any | None:
        """Read one hash field with HGET."""
        with self._errors("read_row", collection_key):
            data = await self._client.hget(self._make_key(collection_key), entry_key)
        return self._decode(data, model)

    async def read_rows(
        self,
        collection_key: str,
        entry_keys: Iterable[str] | None = None,
        model: type[T] | Any = None,
    ) -> list[T] | list[Any]:
        """Read selected fields with HMGET, or every field with HVALS."""
        ns_key = self._make_key(collection_key)
        with self._errors("read_rows", collection_key):
            if entry_keys is None:
                raw_values = await self._client.hvals(ns_key)
            else:
                fields = list(entry_keys)
                if not fields:
                    return []
                raw_values = await self._client.hmget(ns_key, fields)

        values = []
        for raw in raw_values:
            value = self._decode(raw, model)
            if value is not None:
                values.append(value)
        return values

    async def exists_row(self, collection_key: str, entry_key: str) -> bool:
        """Check one field with HEXISTS."""
        with self._errors("exists_row", collection_key):
            return bool(await self._client.hexists(self._make_key(collection_key), entry_key))

    async def delete_row(self, collection_key: str, entry_key: str) -> bool:
        """Delete one field with HDEL."""
        with self._errors("delete_row", collection_key):
            removed = await self._client.hdel(self._make_key(collection_key), entry_key)
        if removed:
            self._deletes += 1
        return bool(removed)

    async def delete_rows(self, collection_key: str, entry_keys: Iterable[str]) -> int:
        """Delete fields one HDEL at a time and count the removals."""
        ns_key = self._make_key(collection_key)
        removed = 0
        with self._errors("delete_rows", collection_key):
            for entry_key in entry_keys:
                removed += int(await self._client.hdel(ns_key, entry_key))
        self._deletes += removed
        return removed

    async def delete_row_set(self, collection_key: str, entry_keys: Iterable[str]) -> bool:
        """Delete all given fields with a single variadic HDEL."""
        fields = list(entry_keys)
        if not fields:
            return False

        with self._errors("delete_row_set", collection_key):
            removed = int(await self._client.hdel(self._make_key(collection_key), *fields))
        self._deletes += removed
        return removed > 0

    # ------------ Health & lifecycle ------------

    async def ping(self) -> timedelta:
        """Time a PING round trip."""
        with self._errors("ping"):
            start = time.perf_counter()
            await self._client.ping()
            elapsed = time.perf_counter() - start
        return max(timedelta(seconds=elapsed), timedelta(microseconds=1))

    async def get_stats(self) -> dict[str, Any]:
        """Return cache statistics and basic Redis info."""
        total_requests = self._hits + self._misses
        stats: dict[str, Any] = {
            "backend": "redis",
            "namespace": self.namespace,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round((self._hits / total_requests) * 100, 2) if total_requests else 0.0,
            "sets": self._sets,
            "deletes": self._deletes,
            "connected": False,
        }

        try:
            stats["connected"] = bool(await self._client.ping())
            info = await self._client.info(section="server")
            stats["redis_version"] = info.get("redis_version")
            stats["redis_mode"] = info.get("redis_mode")
        except RedisError as e:
            # INFO may be restricted; keep the local counters
            logger.warning(f"Failed to get Redis INFO (restricted or unavailable): {e}", extra={"error": str(e)})

        return stats

    async def close(self) -> None:
        """Release the connection when this backend created it."""
        if self._owned_factory is not None:
            await self._owned_factory.close()
            logger.info(f"Closed Redis cache backend for namespace '{self.namespace}'")
        else:
            logger.debug("Redis connection is owned by the caller, leaving it open")
