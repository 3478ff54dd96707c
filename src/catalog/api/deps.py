"""Shared FastAPI dependencies for catalog routers.

The cache runtime is built once in the application lifespan and stored on
app.state; handlers receive it (and the service built on top of it)
through these dependencies instead of importing module globals.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Path, Query, Request
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.api.errors import BadRequestError
from catalog.cache.runtime import CacheRuntime
from catalog.core.models import MAX_LIMIT, ProductFilters, SortField, SortOrder
from catalog.persistence.db import get_session
from catalog.persistence.repositories import ProductRepository, product_reader
from catalog.services.catalog import CatalogService


def get_cache_runtime(request: Request) -> CacheRuntime:
    """FastAPI dependency returning the process-wide cache runtime."""
    return request.app.state.cache


def get_catalog_service(
    session: Annotated[AsyncSession, Depends(get_session)],
    cache: Annotated[CacheRuntime, Depends(get_cache_runtime)],
) -> CatalogService:
    """FastAPI dependency building a request-scoped catalog service.

    Writes use the request session. Cache fills open their own session,
    since a shared fill can outlive the request that started it.
    """
    return CatalogService(cache, ProductRepository(session), reader=product_reader)


def product_filters(
    category: Annotated[str | None, Query()] = None,
    price_min: Annotated[float | None, Query()] = None,
    price_max: Annotated[float | None, Query()] = None,
    in_stock: Annotated[bool | None, Query()] = None,
    search: Annotated[str | None, Query()] = None,
    sort_by: Annotated[SortField | None, Query()] = None,
    sort_order: Annotated[SortOrder | None, Query()] = None,
    limit: Annotated[int, Query(ge=1, le=MAX_LIMIT)] = 10,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> ProductFilters:
    """FastAPI dependency collecting listing filters from the query string."""
    try:
        return ProductFilters(
            category=category,
            price_min=price_min,
            price_max=price_max,
            in_stock=in_stock,
            search=search,
            sort_by=sort_by,
            sort_order=sort_order,
            limit=limit,
            offset=offset,
        )
    except ValidationError as exc:
        raise BadRequestError(exc.errors()[0]["msg"]) from exc


# Type aliases for cleaner router signatures
CatalogServiceDep = Annotated[CatalogService, Depends(get_catalog_service)]
FiltersDep = Annotated[ProductFilters, Depends(product_filters)]
ProductIdPath = Annotated[int, Path(ge=1, description="Product id")]
