"""Catalog service: product reads through the cache, writes with invalidation.

Reads derive a cache key, then go through CacheAside with the TTL of the
key's category. Writes commit to the database first and only then fan out
cache invalidation, so a failed write never drops cache entries.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import AsyncIterator, Callable, Mapping
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from dataclasses import dataclass
from typing import Any, Protocol

from catalog.cache.admin import CacheStats
from catalog.cache.aside import CachedRead
from catalog.cache.invalidation import InvalidationReport
from catalog.cache.keys import CacheCategory
from catalog.cache.runtime import CacheRuntime
from catalog.core.canonicalize import normalize_filters
from catalog.core.models import DEFAULT_LIMIT

logger = logging.getLogger(__name__)


class ProductSource(Protocol):
    """Persistence operations the service depends on."""

    async def find_by_id(self, product_id: int) -> dict[str, Any] | None: ...

    async def find_all(self, filters: Mapping[str, Any]) -> list[dict[str, Any]]: ...

    async def count(self, filters: Mapping[str, Any]) -> int: ...

    async def distinct_categories(self) -> list[str]: ...

    async def create(self, data: Mapping[str, Any]) -> dict[str, Any]: ...

    async def update(self, product_id: int, data: Mapping[str, Any]) -> dict[str, Any] | None: ...

    async def delete(self, product_id: int) -> dict[str, Any] | None: ...

    async def commit(self) -> None: ...


# Opens a ProductSource whose lifetime is the async with block
ProductReader = Callable[[], AbstractAsyncContextManager[ProductSource]]


@dataclass(frozen=True)
class MutationResult:
    """Outcome of a product write."""

    product: dict[str, Any]
    elapsed_ms: int
    invalidation: InvalidationReport


def paginate(filters: Mapping[str, Any], products: list[dict[str, Any]], total: int) -> dict[str, Any]:
    """Build the listing page payload that gets cached."""
    limit = filters.get("limit") or DEFAULT_LIMIT
    offset = filters.get("offset") or 0
    return {
        "products": products,
        "total": total,
        "page": offset // limit + 1,
        "limit": limit,
        "total_pages": math.ceil(total / limit),
    }


class CatalogService:
    """Product catalog operations backed by the cache-aside layer.

    products serves writes. When reader is given, cache misses read through
    it instead, each fill on its own source; otherwise they use products.
    """

    def __init__(
        self,
        cache: CacheRuntime,
        products: ProductSource,
        reader: ProductReader | None = None,
    ) -> None:
        self.cache = cache
        self.products = products
        self.reader = reader

    @asynccontextmanager
    async def _source(self) -> AsyncIterator[ProductSource]:
        if self.reader is None:
            yield self.products
            return
        async with self.reader() as source:
            yield source

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def get_product(self, product_id: int) -> CachedRead[dict[str, Any] | None]:
        """Get one product. value is None when the product doesn't exist."""

        async def fetch() -> dict[str, Any] | None:
            async with self._source() as source:
                return await source.find_by_id(product_id)

        read = await self.cache.aside.read_through(
            self.cache.keys.product_key(product_id),
            self.cache.ttl.ttl_for(CacheCategory.PRODUCT),
            fetch,
            category=CacheCategory.PRODUCT.value,
        )
        logger.info(
            "Product %s retrieved from %s in %dms",
            product_id,
            "cache" if read.cache_hit else "database",
            read.elapsed_ms,
        )
        return read

    async def list_products(self, filters: Mapping[str, Any]) -> CachedRead[dict[str, Any]]:
        """Get one page of products matching the filters."""
        filter_set = normalize_filters(filters)

        async def fetch() -> dict[str, Any]:
            async with self._source() as source:
                products = await source.find_all(filter_set)
                total = await source.count(filter_set)
            return paginate(filter_set, products, total)

        read = await self.cache.aside.read_through(
            self.cache.keys.listing_key(filter_set),
            self.cache.ttl.ttl_for(CacheCategory.LISTING),
            fetch,
            category=CacheCategory.LISTING.value,
        )
        logger.info(
            "Products retrieved from %s in %dms",
            "cache" if read.cache_hit else "database",
            read.elapsed_ms,
        )
        return read

    async def get_categories(self) -> CachedRead[list[str]]:
        """Get the distinct product categories."""

        async def fetch() -> list[str]:
            async with self._source() as source:
                return await source.distinct_categories()

        read = await self.cache.aside.read_through(
            self.cache.keys.facet_key(),
            self.cache.ttl.ttl_for(CacheCategory.CATEGORIES),
            fetch,
            category=CacheCategory.CATEGORIES.value,
        )
        logger.info(
            "Categories retrieved from %s in %dms",
            "cache" if read.cache_hit else "database",
            read.elapsed_ms,
        )
        return read

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def create_product(self, data: Mapping[str, Any]) -> MutationResult:
        start = time.perf_counter()
        product = await self.products.create(data)
        await self.products.commit()
        report = await self.cache.invalidation.on_entity_mutated(product["id"])
        return self._mutation(product, start, report, "created")

    async def update_product(self, product_id: int, data: Mapping[str, Any]) -> MutationResult | None:
        start = time.perf_counter()
        product = await self.products.update(product_id, data)
        if product is None:
            return None
        await self.products.commit()
        report = await self.cache.invalidation.on_entity_mutated(product_id)
        return self._mutation(product, start, report, "updated")

    async def delete_product(self, product_id: int) -> MutationResult | None:
        start = time.perf_counter()
        product = await self.products.delete(product_id)
        if product is None:
            return None
        await self.products.commit()
        report = await self.cache.invalidation.on_entity_mutated(product_id)
        return self._mutation(product, start, report, "deleted")

    def _mutation(
        self,
        product: dict[str, Any],
        start: float,
        report: InvalidationReport,
        verb: str,
    ) -> MutationResult:
        elapsed_ms = int((time.perf_counter() - start) * 1000)
        logger.info("Product %s %s in %dms", product["id"], verb, elapsed_ms)
        return MutationResult(product=product, elapsed_ms=elapsed_ms, invalidation=report)

    # -------------------------------------------------------------------------
    # Cache maintenance
    # -------------------------------------------------------------------------

    async def cache_stats(self) -> CacheStats:
        return await self.cache.admin.stats()

    async def clear_cache(self) -> bool:
        return await self.cache.admin.clear_all()
