"""Cache-aside read path.

read_through() checks the store first and only calls the fetch function
(a database read) on a miss, then populates the store with the result.
Every result is tagged with whether it came from the cache and how long
the call took, so the HTTP layer can annotate responses and metrics.

Concurrent misses on the same key each run their own fetch unless
single-flight is enabled, in which case they share one in-flight fetch.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from catalog.cache.store import CacheStore
from catalog.observability.metrics import record_cache_hit, record_cache_miss

logger = logging.getLogger(__name__)

T = TypeVar("T")

Fetch = Callable[[], Awaitable[T]]


@dataclass(frozen=True)
class CachedRead(Generic[T]):
    """A value plus where it came from."""

    value: T
    cache_hit: bool
    elapsed_ms: int


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


class CacheAside:
    """Cache-aside orchestrator over a CacheStore."""

    def __init__(self, store: CacheStore, *, single_flight: bool = False) -> None:
        self.store = store
        self.single_flight = single_flight
        self._in_flight: dict[str, asyncio.Task[Any]] = {}

    async def read_through(
        self,
        key: str,
        ttl_seconds: int,
        fetch: Fetch[T],
        *,
        category: str = "other",
    ) -> CachedRead[T]:
        """Return the cached value for key, or fetch and cache it.

        Store failures count as misses. Fetch failures propagate unchanged
        and nothing is cached. A None fetch result is returned but not
        cached.
        """
        start = time.perf_counter()

        lookup = await self.store.get(key)
        if lookup.hit:
            record_cache_hit(category)
            logger.debug("Cache hit for %s", key)
            return CachedRead(value=lookup.value, cache_hit=True, elapsed_ms=_elapsed_ms(start))

        record_cache_miss(category)
        logger.debug("Cache miss for %s (%s)", key, lookup.status.value)

        if self.single_flight:
            value = await self._shared_fetch(key, ttl_seconds, fetch)
        else:
            value = await self._fetch_and_store(key, ttl_seconds, fetch)

        return CachedRead(value=value, cache_hit=False, elapsed_ms=_elapsed_ms(start))

    async def _fetch_and_store(self, key: str, ttl_seconds: int, fetch: Fetch[T]) -> T:
        value = await fetch()
        if value is not None:
            await self.store.set(key, value, ttl_seconds)
        return value

    async def _shared_fetch(self, key: str, ttl_seconds: int, fetch: Fetch[T]) -> T:
        """Attach to the pending fetch for key, starting one if none exists."""
        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._fetch_and_store(key, ttl_seconds, fetch))
            self._in_flight[key] = task
            task.add_done_callback(lambda done: self._release(key, done))
        else:
            logger.debug("Joining in-flight fetch for %s", key)

        # A cancelled caller must not cancel the fetch other callers wait on
        return await asyncio.shield(task)

    def _release(self, key: str, task: asyncio.Task[Any]) -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]
        if not task.cancelled():
            # Mark the exception retrieved when every waiter went away
            task.exception()

    @property
    def in_flight(self) -> int:
        """Number of keys with a shared fetch in progress."""
        return len(self._in_flight)
