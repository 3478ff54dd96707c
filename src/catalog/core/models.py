"""Pydantic models for products and listing filters."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

SortField = Literal["price", "name", "created_at"]
SortOrder = Literal["asc", "desc"]

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


class ProductCreate(BaseModel):
    """Payload for creating a product."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    name: str = Field(min_length=1, max_length=255)
    description: str | None = Field(default=None, min_length=1, max_length=1000)
    category: str = Field(min_length=1, max_length=100)
    price: float = Field(gt=0)
    stock: int = Field(ge=0)
    image_url: str | None = Field(default=None, alias="imageUrl")


class ProductUpdate(BaseModel):
    """Partial update; at least one field must be set."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=1000)
    category: str | None = Field(default=None, min_length=1, max_length=100)
    price: float | None = Field(default=None, gt=0)
    stock: int | None = Field(default=None, ge=0)
    image_url: str | None = Field(default=None, alias="imageUrl")

    @model_validator(mode="after")
    def _not_empty(self) -> ProductUpdate:
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided")
        return self


class ProductFilters(BaseModel):
    """Listing query filters.

    to_filter_set() is the value the cache key is derived from: unset and
    None filters are left out, so they never change the key.
    """

    model_config = ConfigDict(extra="forbid")

    category: str | None = Field(default=None, min_length=1, max_length=100)
    price_min: float | None = Field(default=None, gt=0)
    price_max: float | None = Field(default=None, gt=0)
    in_stock: bool | None = None
    search: str | None = Field(default=None, min_length=1, max_length=100)
    sort_by: SortField | None = None
    sort_order: SortOrder | None = None
    limit: int = Field(default=DEFAULT_LIMIT, ge=1, le=MAX_LIMIT)
    offset: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _price_range(self) -> ProductFilters:
        if (
            self.price_min is not None
            and self.price_max is not None
            and self.price_min > self.price_max
        ):
            raise ValueError("price_min cannot be greater than price_max")
        return self

    def to_filter_set(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class Product(BaseModel):
    """Product as returned by the API and stored in the cache."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None = None
    category: str
    price: float
    stock: int
    image_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
