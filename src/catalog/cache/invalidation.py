"""Cache invalidation on product writes.

A create, update or delete of one product can change the result of any
listing query and can add or orphan a category value, so a mutation fans
out to three independent deletions:

- the product's own key
- every listing key (pattern delete over the listing namespace)
- the categories facet key

The deletions run concurrently and a failure in one never blocks the
others. Each is idempotent, so interleaved fan-outs from concurrent writes
are harmless. A read-miss that fetched pre-mutation data and writes it
back after the fan-out leaves a stale entry until its TTL expires; that
window is accepted.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from catalog.cache.keys import CacheCategory, CacheKeys
from catalog.cache.store import CacheStore
from catalog.observability.metrics import record_invalidation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InvalidationReport:
    """Which of the three deletions succeeded."""

    product: bool
    listings: bool
    categories: bool

    @property
    def ok(self) -> bool:
        return self.product and self.listings and self.categories


class InvalidationCoordinator:
    """Fans out cache deletions after a product mutation."""

    def __init__(self, store: CacheStore, keys: CacheKeys) -> None:
        self.store = store
        self.keys = keys

    async def on_entity_mutated(self, product_id: int | str) -> InvalidationReport:
        """Invalidate every cache entry that may now be stale.

        Called after the mutation is committed. On create, product_id is
        the newly assigned id; its delete is a no-op but is still issued.
        """
        results = await asyncio.gather(
            self.store.delete(self.keys.product_key(product_id)),
            self.store.delete_pattern(self.keys.category_pattern(CacheCategory.LISTING)),
            self.store.delete(self.keys.facet_key()),
            return_exceptions=True,
        )
        product_ok, listings_ok, categories_ok = (
            self._outcome(category, result)
            for category, result in zip(
                (CacheCategory.PRODUCT, CacheCategory.LISTING, CacheCategory.CATEGORIES),
                results,
            )
        )

        report = InvalidationReport(
            product=product_ok,
            listings=listings_ok,
            categories=categories_ok,
        )
        if report.ok:
            logger.info("Invalidated caches for product %s", product_id)
        else:
            logger.warning("Partial cache invalidation for product %s: %s", product_id, report)
        return report

    def _outcome(self, category: CacheCategory, result: bool | BaseException) -> bool:
        if isinstance(result, BaseException):
            logger.error(
                "Invalidation of %s cache raised",
                category.value,
                exc_info=(type(result), result, result.__traceback__),
            )
            ok = False
        else:
            ok = bool(result)
        record_invalidation(category.value, ok)
        return ok
