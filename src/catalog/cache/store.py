"""Cache store interface.

Every operation is best-effort ("fail open"): a store never raises on
transport failure. Reads report the failure through CacheLookup.status,
writes and deletions return False, counts return 0. Callers treat an
ERROR lookup exactly like a MISS, so an unreachable cache degrades the API
to direct database reads instead of an outage.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any


class LookupStatus(str, Enum):
    """Outcome of a cache read."""

    HIT = "hit"
    MISS = "miss"
    ERROR = "error"


@dataclass(frozen=True)
class CacheLookup:
    """Result of CacheStore.get.

    value is only meaningful when status is HIT.
    """

    status: LookupStatus
    value: Any = None

    @property
    def hit(self) -> bool:
        return self.status is LookupStatus.HIT

    @classmethod
    def found(cls, value: Any) -> CacheLookup:
        return cls(LookupStatus.HIT, value)

    @classmethod
    def missing(cls) -> CacheLookup:
        return cls(LookupStatus.MISS)

    @classmethod
    def failed(cls) -> CacheLookup:
        return cls(LookupStatus.ERROR)


class CacheStore(ABC):
    """Key/value store with per-key TTL and glob-pattern operations."""

    @abstractmethod
    async def get(self, key: str) -> CacheLookup:
        """Look up a key."""

    @abstractmethod
    async def set(self, key: str, value: Any, ttl_seconds: int) -> bool:
        """Store a JSON-serializable value with a TTL."""

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete a key. Deleting a missing key succeeds."""

    @abstractmethod
    async def delete_pattern(self, pattern: str) -> bool:
        """Delete every key matching a glob. Zero matches succeeds."""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check whether a key is present."""

    @abstractmethod
    async def count(self, pattern: str) -> int:
        """Count keys matching a glob."""

    @abstractmethod
    async def flush_all(self) -> bool:
        """Remove every key in the store, not only this namespace."""

    @abstractmethod
    async def health_check(self) -> bool:
        """Check store connectivity."""

    async def close(self) -> None:
        """Release connections held by the store."""
