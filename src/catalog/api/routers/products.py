"""Product catalog API router.

- GET    /api/products               - List products (cached per filter set)
- GET    /api/products/categories    - Distinct categories (cached facet)
- GET    /api/products/cache/stats   - Live cache key counts
- DELETE /api/products/cache         - Clear the whole cache
- GET    /api/products/{id}          - Get product (cached)
- POST   /api/products               - Create product
- PUT    /api/products/{id}          - Update product
- DELETE /api/products/{id}          - Delete product

Cached reads carry an X-Cache: HIT|MISS header and meta.cached in the body.
Every write invalidates the product's key, all listings and the
categories facet.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Response

from catalog.api.deps import CatalogServiceDep, FiltersDep, ProductIdPath
from catalog.api.errors import NotFoundError
from catalog.cache.aside import CachedRead
from catalog.core.models import ProductCreate, ProductUpdate

router = APIRouter(prefix="/api/products", tags=["Products"])


def _timestamp() -> str:
    return datetime.now(UTC).isoformat()


def _cached_meta(response: Response, read: CachedRead[Any]) -> dict[str, Any]:
    response.headers["X-Cache"] = "HIT" if read.cache_hit else "MISS"
    response.headers["X-Response-Time"] = f"{read.elapsed_ms}ms"
    return {
        "cached": read.cache_hit,
        "responseTime": read.elapsed_ms,
        "timestamp": _timestamp(),
    }


@router.get("")
async def list_products(
    response: Response,
    filters: FiltersDep,
    service: CatalogServiceDep,
) -> dict[str, Any]:
    """List products matching the query filters."""
    read = await service.list_products(filters.to_filter_set())
    page = read.value
    return {
        "success": True,
        "data": page["products"],
        "pagination": {
            "total": page["total"],
            "page": page["page"],
            "limit": page["limit"],
            "totalPages": page["total_pages"],
        },
        "meta": _cached_meta(response, read),
    }


@router.get("/categories")
async def get_categories(response: Response, service: CatalogServiceDep) -> dict[str, Any]:
    """List distinct product categories."""
    read = await service.get_categories()
    return {"success": True, "data": read.value, "meta": _cached_meta(response, read)}


@router.get("/cache/stats")
async def get_cache_stats(service: CatalogServiceDep) -> dict[str, Any]:
    """Count live cache keys per category."""
    stats = await service.cache_stats()
    return {"success": True, "data": stats.to_dict(), "meta": {"timestamp": _timestamp()}}


@router.delete("/cache")
async def clear_cache(service: CatalogServiceDep) -> dict[str, Any]:
    """Delete every cached entry and flush the cache store."""
    cleared = await service.clear_cache()
    return {
        "success": cleared,
        "message": "Cache cleared successfully" if cleared else "Cache clear incomplete",
        "meta": {"timestamp": _timestamp()},
    }


@router.get("/{product_id}")
async def get_product(
    product_id: ProductIdPath,
    response: Response,
    service: CatalogServiceDep,
) -> dict[str, Any]:
    """Get a single product."""
    read = await service.get_product(product_id)
    if read.value is None:
        raise NotFoundError("Product", product_id)
    return {"success": True, "data": read.value, "meta": _cached_meta(response, read)}


@router.post("", status_code=201)
async def create_product(payload: ProductCreate, service: CatalogServiceDep) -> dict[str, Any]:
    """Create a product."""
    result = await service.create_product(payload.model_dump(exclude_none=True))
    return {
        "success": True,
        "data": result.product,
        "meta": {"responseTime": result.elapsed_ms, "timestamp": _timestamp()},
    }


@router.put("/{product_id}")
async def update_product(
    product_id: ProductIdPath,
    payload: ProductUpdate,
    service: CatalogServiceDep,
) -> dict[str, Any]:
    """Partially update a product."""
    result = await service.update_product(product_id, payload.model_dump(exclude_unset=True))
    if result is None:
        raise NotFoundError("Product", product_id)
    return {
        "success": True,
        "data": result.product,
        "meta": {"responseTime": result.elapsed_ms, "timestamp": _timestamp()},
    }


@router.delete("/{product_id}")
async def delete_product(product_id: ProductIdPath, service: CatalogServiceDep) -> dict[str, Any]:
    """Delete a product."""
    result = await service.delete_product(product_id)
    if result is None:
        raise NotFoundError("Product", product_id)
    return {
        "success": True,
        "data": {"id": result.product["id"], "deleted": True},
        "meta": {"responseTime": result.elapsed_ms, "timestamp": _timestamp()},
    }
