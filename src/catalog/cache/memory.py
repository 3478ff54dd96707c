"""In-process cache store.

Suitable for development, tests and single-process deployments. Entries
expire on a monotonic clock and patterns use shell-style globs, matching
the Redis semantics the API relies on. Values are kept as orjson bytes so
cached reads never share mutable objects with callers.

For multiple API processes, use RedisCache instead.
"""

from __future__ import annotations

import fnmatch
import logging
import time
from collections.abc import Callable
from typing import Any

import orjson

from catalog.cache.store import CacheLookup, CacheStore
from catalog.observability.metrics import record_cache_error

logger = logging.getLogger(__name__)

# Expired entries are dropped once every SWEEP_EVERY writes
SWEEP_EVERY = 256


class InMemoryCache(CacheStore):
    """CacheStore backed by a dict of (expires_at, payload)."""

    backend = "memory"

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._entries: dict[str, tuple[float, bytes]] = {}
        self._clock = clock
        self._writes = 0

    def _live(self, key: str) -> bytes | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, payload = entry
        if expires_at <= self._clock():
            del self._entries[key]
            return None
        return payload

    def _sweep(self) -> None:
        now = self._clock()
        expired = [key for key, (expires_at, _) in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug("Swept %d expired cache entries", len(expired))

    def _matching(self, pattern: str) -> list[str]:
        return [key for key in list(self._entries) if fnmatch.fnmatchcase(key, pattern)]

    async def get(self, key: str) -> CacheLookup:
        payload = self._live(key)
        if payload is None:
            return CacheLookup.missing()
        return CacheLookup.found(orjson.loads(payload))

    async def set(self, key: str, value: Any, ttl_seconds: int) -> bool:
        try:
            payload = orjson.dumps(value, option=orjson.OPT_NON_STR_KEYS)
        except orjson.JSONEncodeError as exc:
            record_cache_error("set", self.backend)
            logger.warning("Cannot cache value for %s: %s", key, exc)
            return False
        self._entries[key] = (self._clock() + ttl_seconds, payload)
        self._writes += 1
        if self._writes % SWEEP_EVERY == 0:
            self._sweep()
        return True

    async def delete(self, key: str) -> bool:
        self._entries.pop(key, None)
        return True

    async def delete_pattern(self, pattern: str) -> bool:
        for key in self._matching(pattern):
            self._entries.pop(key, None)
        return True

    async def exists(self, key: str) -> bool:
        return self._live(key) is not None

    async def count(self, pattern: str) -> int:
        return sum(1 for key in self._matching(pattern) if self._live(key) is not None)

    async def flush_all(self) -> bool:
        self._entries.clear()
        return True

    async def health_check(self) -> bool:
        return True
