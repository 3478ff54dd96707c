"""Global pytest configuration and fixtures."""

from __future__ import annotations

import pytest

from catalog.cache.keys import CacheKeys
from catalog.cache.memory import InMemoryCache
from catalog.cache.runtime import CacheRuntime, build_cache_runtime
from catalog.config import CacheConfig


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_store(clock: FakeClock) -> InMemoryCache:
    return InMemoryCache(clock=clock)


@pytest.fixture
def keys() -> CacheKeys:
    return CacheKeys("test")


@pytest.fixture
def cache_config() -> CacheConfig:
    return CacheConfig(prefix="test", backend="memory")


@pytest.fixture
def cache_runtime(cache_config: CacheConfig, memory_store: InMemoryCache) -> CacheRuntime:
    return build_cache_runtime(cache_config, store=memory_store)
