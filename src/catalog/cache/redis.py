"""Redis cache store for the catalog API.

Uses the redis-py async client with its built-in connection pool. Values
are stored as orjson bytes. Every call is bounded by a short timeout so a
network partition looks like a miss instead of a hung request.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable
from typing import TYPE_CHECKING, Any, TypeVar, cast

import orjson
import redis.asyncio as redis
from redis.exceptions import RedisError

from catalog.cache.store import CacheLookup, CacheStore
from catalog.observability.metrics import record_cache_error, record_cache_operation

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Transport-level failures that are absorbed by the store
CACHE_ERRORS: tuple[type[BaseException], ...] = (RedisError, OSError, asyncio.TimeoutError)

DEFAULT_TIMEOUT = 0.5
SCAN_COUNT = 500
DELETE_BATCH = 500


def create_redis_client(url: str) -> Redis:
    """Create a Redis client backed by a connection pool."""
    return redis.from_url(  # type: ignore[no-untyped-call]
        url,
        decode_responses=False,  # We're storing bytes
    )


class RedisCache(CacheStore):
    """CacheStore backed by Redis."""

    backend = "redis"

    def __init__(self, client: Redis, timeout: float | None = DEFAULT_TIMEOUT):
        self.client = client
        self.timeout = timeout

    async def _call(self, operation: str, awaitable: Awaitable[T]) -> T:
        """Run one Redis round trip under the configured timeout."""
        start = time.perf_counter()
        try:
            if self.timeout:
                return await asyncio.wait_for(awaitable, self.timeout)
            return await awaitable
        finally:
            record_cache_operation(operation, time.perf_counter() - start, self.backend)

    def _failed(self, operation: str, target: str, exc: BaseException) -> None:
        record_cache_error(operation, self.backend)
        logger.warning(
            "Redis %s failed for %s: %s",
            operation.upper(),
            target,
            str(exc) or type(exc).__name__,
        )

    async def _scan(self, pattern: str) -> list[bytes]:
        """Collect every key matching pattern, one SCAN page per round trip.

        The timeout bounds each page, not the whole walk, so a large
        keyspace takes as many pages as it needs.
        """
        keys: list[bytes] = []
        cursor = 0
        while True:
            cursor, page = await self._call(
                "scan", self.client.scan(cursor, match=pattern, count=SCAN_COUNT)
            )
            keys.extend(page)
            if not cursor:
                return keys

    # -------------------------------------------------------------------------
    # Single key operations
    # -------------------------------------------------------------------------

    async def get(self, key: str) -> CacheLookup:
        try:
            raw = await self._call("get", self.client.get(key))
        except CACHE_ERRORS as exc:
            self._failed("get", key, exc)
            return CacheLookup.failed()

        if raw is None:
            return CacheLookup.missing()

        try:
            return CacheLookup.found(orjson.loads(raw))
        except orjson.JSONDecodeError as exc:
            # Malformed payload, treated like an unreachable store
            self._failed("get", key, exc)
            return CacheLookup.failed()

    async def set(self, key: str, value: Any, ttl_seconds: int) -> bool:
        try:
            payload = orjson.dumps(value, option=orjson.OPT_NON_STR_KEYS)
        except orjson.JSONEncodeError as exc:
            self._failed("set", key, exc)
            return False

        try:
            await self._call("set", self.client.set(key, payload, ex=ttl_seconds))
        except CACHE_ERRORS as exc:
            self._failed("set", key, exc)
            return False
        return True

    async def delete(self, key: str) -> bool:
        try:
            await self._call("delete", self.client.delete(key))
        except CACHE_ERRORS as exc:
            self._failed("delete", key, exc)
            return False
        return True

    async def exists(self, key: str) -> bool:
        try:
            found = await self._call("exists", self.client.exists(key))
        except CACHE_ERRORS as exc:
            self._failed("exists", key, exc)
            return False
        return bool(found)

    # -------------------------------------------------------------------------
    # Pattern operations
    # -------------------------------------------------------------------------

    async def delete_pattern(self, pattern: str) -> bool:
        """List matching keys, then delete them in batches."""
        try:
            keys = await self._scan(pattern)
            for i in range(0, len(keys), DELETE_BATCH):
                await self._call("delete", self.client.delete(*keys[i : i + DELETE_BATCH]))
        except CACHE_ERRORS as exc:
            self._failed("delete_pattern", pattern, exc)
            return False

        logger.debug("Deleted %d keys matching %s", len(keys), pattern)
        return True

    async def count(self, pattern: str) -> int:
        try:
            keys = await self._scan(pattern)
        except CACHE_ERRORS as exc:
            self._failed("count", pattern, exc)
            return 0
        return len(keys)

    async def flush_all(self) -> bool:
        """Flush the selected Redis database."""
        try:
            await self._call("flush", self.client.flushdb())
        except CACHE_ERRORS as exc:
            self._failed("flush", "*", exc)
            return False
        return True

    async def health_check(self) -> bool:
        """Check Redis connectivity."""
        try:
            await self._call("ping", cast(Awaitable[bool], self.client.ping()))
            return True
        except CACHE_ERRORS:
            return False

    async def close(self) -> None:
        """Close Redis connections."""
        await self.client.aclose()
