"""Repository pattern for product persistence.

Read methods return plain JSON-ready dicts (the same shape the cache
stores), so a cached read and a database read are indistinguishable to
callers. Write methods flush; the caller commits and then invalidates the
cache.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import ColumnElement, Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.models import DEFAULT_LIMIT, Product
from catalog.persistence.db import standalone_session
from catalog.persistence.tables import ProductTable

SORTABLE_FIELDS = {
    "price": ProductTable.price,
    "name": ProductTable.name,
    "created_at": ProductTable.created_at,
}

# Fields stored lower-case
_LOWERCASED = ("name", "category")


def to_dict(row: ProductTable) -> dict[str, Any]:
    """Convert a row to its JSON-ready representation."""
    return Product.model_validate(row).model_dump(mode="json")


def _normalize(data: Mapping[str, Any]) -> dict[str, Any]:
    values = dict(data)
    for name in _LOWERCASED:
        if isinstance(values.get(name), str):
            values[name] = values[name].lower()
    return values


def _conditions(filters: Mapping[str, Any]) -> list[ColumnElement[bool]]:
    conditions: list[ColumnElement[bool]] = []

    category = filters.get("category")
    if category:
        conditions.append(ProductTable.category == category.lower())

    price_min = filters.get("price_min")
    if price_min is not None:
        conditions.append(ProductTable.price >= price_min)

    price_max = filters.get("price_max")
    if price_max is not None:
        conditions.append(ProductTable.price <= price_max)

    in_stock = filters.get("in_stock")
    if in_stock is True:
        conditions.append(ProductTable.stock > 0)
    elif in_stock is False:
        conditions.append(ProductTable.stock == 0)

    search = filters.get("search")
    if search:
        conditions.append(
            or_(
                ProductTable.name.icontains(search, autoescape=True),
                ProductTable.description.icontains(search, autoescape=True),
            )
        )

    return conditions


def _ordered(stmt: Select[Any], filters: Mapping[str, Any]) -> Select[Any]:
    column = SORTABLE_FIELDS.get(filters.get("sort_by") or "", ProductTable.created_at)
    descending = str(filters.get("sort_order") or "desc").lower() != "asc"
    primary = column.desc() if descending else column.asc()
    # id as tie-breaker keeps pages stable
    return stmt.order_by(primary, ProductTable.id.desc() if descending else ProductTable.id.asc())


class ProductRepository:
    """Repository for product operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    # -------------------------------------------------------------------------
    # Read operations
    # -------------------------------------------------------------------------

    async def find_by_id(self, product_id: int) -> dict[str, Any] | None:
        row = await self.session.get(ProductTable, product_id)
        if row is None:
            return None
        return to_dict(row)

    async def find_all(self, filters: Mapping[str, Any]) -> list[dict[str, Any]]:
        """Return one page of products matching the filters."""
        stmt = select(ProductTable).where(*_conditions(filters))
        stmt = _ordered(stmt, filters)
        stmt = stmt.limit(filters.get("limit") or DEFAULT_LIMIT).offset(filters.get("offset") or 0)
        result = await self.session.execute(stmt)
        return [to_dict(row) for row in result.scalars()]

    async def count(self, filters: Mapping[str, Any]) -> int:
        """Count every product matching the filters (pagination ignored)."""
        stmt = select(func.count()).select_from(ProductTable).where(*_conditions(filters))
        return (await self.session.scalar(stmt)) or 0

    async def distinct_categories(self) -> list[str]:
        stmt = select(ProductTable.category).group_by(ProductTable.category).order_by(
            ProductTable.category
        )
        result = await self.session.execute(stmt)
        return list(result.scalars())

    # -------------------------------------------------------------------------
    # Write operations
    # -------------------------------------------------------------------------

    async def create(self, data: Mapping[str, Any]) -> dict[str, Any]:
        row = ProductTable(**_normalize(data))
        self.session.add(row)
        await self.session.flush()
        await self.session.refresh(row)
        return to_dict(row)

    async def update(self, product_id: int, data: Mapping[str, Any]) -> dict[str, Any] | None:
        """Apply a partial update.

        Returns:
            The updated product, or None if not found.
        """
        row = await self.session.get(ProductTable, product_id)
        if row is None:
            return None

        for name, value in _normalize(data).items():
            setattr(row, name, value)

        await self.session.flush()
        await self.session.refresh(row)
        return to_dict(row)

    async def delete(self, product_id: int) -> dict[str, Any] | None:
        """Delete a product.

        Returns:
            The deleted product, or None if not found.
        """
        row = await self.session.get(ProductTable, product_id)
        if row is None:
            return None

        deleted = to_dict(row)
        await self.session.delete(row)
        await self.session.flush()
        return deleted

    async def commit(self) -> None:
        await self.session.commit()


@asynccontextmanager
async def product_reader() -> AsyncIterator[ProductRepository]:
    """Repository on a standalone session, for cache fills."""
    async with standalone_session() as session:
        yield ProductRepository(session)
