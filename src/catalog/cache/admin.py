"""Cache statistics and maintenance operations."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from catalog.cache.keys import CacheCategory, CacheKeys
from catalog.cache.store import CacheStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheStats:
    """Live key counts per cache category."""

    product_count: int
    listing_count: int
    categories_count: int

    @property
    def total(self) -> int:
        return self.product_count + self.listing_count + self.categories_count

    def to_dict(self) -> dict[str, int]:
        return {
            "productCount": self.product_count,
            "listingCount": self.listing_count,
            "categoriesCount": self.categories_count,
            "total": self.total,
        }


class CacheAdmin:
    """Operational view of the cache namespace."""

    def __init__(self, store: CacheStore, keys: CacheKeys) -> None:
        self.store = store
        self.keys = keys

    async def stats(self) -> CacheStats:
        """Count live keys per category. Counts are 0 when the store is down."""
        products, listings, categories = await asyncio.gather(
            self.store.count(self.keys.category_pattern(CacheCategory.PRODUCT)),
            self.store.count(self.keys.category_pattern(CacheCategory.LISTING)),
            self.store.count(self.keys.category_pattern(CacheCategory.CATEGORIES)),
        )
        return CacheStats(
            product_count=products,
            listing_count=listings,
            categories_count=categories,
        )

    async def clear_all(self) -> bool:
        """Delete every key under the prefix, then flush the whole store.

        Destructive and non-selective: keys outside the namespace are
        flushed too. Meant for maintenance and test teardown.
        """
        namespace_ok = await self.store.delete_pattern(self.keys.namespace_pattern())
        flush_ok = await self.store.flush_all()
        if namespace_ok and flush_ok:
            logger.info("All cache cleared")
        else:
            logger.warning("Cache clear incomplete (namespace=%s, flush=%s)", namespace_ok, flush_ok)
        return namespace_ok and flush_ok
