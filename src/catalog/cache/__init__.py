"""Cache layer for the catalog API.

Provides Redis caching with the cache-aside pattern:
- Deterministic keys for products, listing queries and the categories facet
- Category-specific TTLs (products, listings, categories)
- Fan-out invalidation on product writes
- Fail-open store: cache outages degrade to database reads
"""

from catalog.cache.admin import CacheAdmin, CacheStats
from catalog.cache.aside import CacheAside, CachedRead
from catalog.cache.invalidation import InvalidationCoordinator, InvalidationReport
from catalog.cache.keys import CacheCategory, CacheKeys, TtlPolicy
from catalog.cache.memory import InMemoryCache
from catalog.cache.redis import RedisCache, create_redis_client
from catalog.cache.runtime import CacheRuntime, build_cache_runtime, create_cache_store
from catalog.cache.store import CacheLookup, CacheStore, LookupStatus

__all__ = [
    # Keys and policy
    "CacheCategory",
    "CacheKeys",
    "TtlPolicy",
    # Stores
    "CacheLookup",
    "CacheStore",
    "LookupStatus",
    "InMemoryCache",
    "RedisCache",
    "create_redis_client",
    # Read/write paths
    "CacheAside",
    "CachedRead",
    "InvalidationCoordinator",
    "InvalidationReport",
    # Instrumentation
    "CacheAdmin",
    "CacheStats",
    # Wiring
    "CacheRuntime",
    "build_cache_runtime",
    "create_cache_store",
]
