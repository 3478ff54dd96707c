"""Runtime wiring for the cache layer.

One CacheRuntime is built at process start (the FastAPI lifespan or a CLI
command) and handed to whoever needs it. No cache component reads global
state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from catalog.cache.admin import CacheAdmin
from catalog.cache.aside import CacheAside
from catalog.cache.invalidation import InvalidationCoordinator
from catalog.cache.keys import CacheKeys, TtlPolicy
from catalog.cache.memory import InMemoryCache
from catalog.cache.redis import RedisCache, create_redis_client
from catalog.cache.store import CacheStore
from catalog.config import CacheConfig

logger = logging.getLogger(__name__)


@dataclass
class CacheRuntime:
    """Every cache component, sharing one store and one key schema."""

    config: CacheConfig
    store: CacheStore
    keys: CacheKeys
    ttl: TtlPolicy
    aside: CacheAside
    invalidation: InvalidationCoordinator
    admin: CacheAdmin

    async def close(self) -> None:
        await self.store.close()
        logger.info("Cache runtime closed (%s)", type(self.store).__name__)


def create_cache_store(config: CacheConfig) -> CacheStore:
    """Create a cache store based on configuration."""
    backend = config.backend.lower()

    if backend in {"memory", "inmemory", "in_memory"}:
        return InMemoryCache()

    if backend == "redis":
        return RedisCache(create_redis_client(config.redis_url), timeout=config.op_timeout)

    raise ValueError("Unsupported cache_backend. Supported values: memory, redis.")


def build_cache_runtime(config: CacheConfig, store: CacheStore | None = None) -> CacheRuntime:
    """Assemble the cache layer from configuration.

    Pass store to reuse an existing store (tests, embedding).
    """
    store = store if store is not None else create_cache_store(config)
    keys = CacheKeys(config.prefix)
    runtime = CacheRuntime(
        config=config,
        store=store,
        keys=keys,
        ttl=TtlPolicy.from_config(config),
        aside=CacheAside(store, single_flight=config.single_flight),
        invalidation=InvalidationCoordinator(store, keys),
        admin=CacheAdmin(store, keys),
    )
    logger.info(
        "Cache runtime ready (%s, prefix=%s, single_flight=%s)",
        type(store).__name__,
        config.prefix,
        config.single_flight,
    )
    return runtime
