"""Tests for product request models."""

import pytest
from pydantic import ValidationError

from catalog.core.models import ProductCreate, ProductFilters, ProductUpdate


class TestProductCreate:
    """Test create payload validation."""

    def test_valid(self) -> None:
        """Minimal valid payload."""
        product = ProductCreate(name="Lamp", category="lighting", price=9.99, stock=0)
        assert product.description is None

    def test_image_url_alias(self) -> None:
        """imageUrl is accepted as an alias."""
        product = ProductCreate.model_validate(
            {"name": "Lamp", "category": "x", "price": 1, "stock": 1, "imageUrl": "http://a/b"}
        )
        assert product.image_url == "http://a/b"

    @pytest.mark.parametrize(
        "override",
        [{"price": 0}, {"stock": -1}, {"name": ""}, {"category": "x" * 101}],
    )
    def test_invalid(self, override: dict) -> None:
        """Out-of-range values are rejected."""
        data = {"name": "Lamp", "category": "x", "price": 1, "stock": 1, **override}
        with pytest.raises(ValidationError):
            ProductCreate(**data)


class TestProductUpdate:
    """Test partial update validation."""

    def test_requires_one_field(self) -> None:
        """Empty updates are rejected."""
        with pytest.raises(ValidationError, match="At least one field"):
            ProductUpdate()

    def test_only_set_fields_are_dumped(self) -> None:
        """Unset fields are left out of the update."""
        update = ProductUpdate(price=5.0)
        assert update.model_dump(exclude_unset=True) == {"price": 5.0}


class TestProductFilters:
    """Test listing filter validation."""

    def test_defaults(self) -> None:
        """limit and offset have defaults; other filters are absent."""
        assert ProductFilters().to_filter_set() == {"limit": 10, "offset": 0}

    def test_price_range(self) -> None:
        """price_min cannot exceed price_max."""
        with pytest.raises(ValidationError, match="price_min"):
            ProductFilters(price_min=10, price_max=5)

    @pytest.mark.parametrize("limit", [0, 101])
    def test_limit_bounds(self, limit: int) -> None:
        """limit is between 1 and 100."""
        with pytest.raises(ValidationError):
            ProductFilters(limit=limit)

    def test_sort_whitelist(self) -> None:
        """Only known sort fields are accepted."""
        with pytest.raises(ValidationError):
            ProductFilters(sort_by="stock")

    def test_filter_set_keeps_false(self) -> None:
        """in_stock=False is a real filter."""
        assert ProductFilters(in_stock=False).to_filter_set()["in_stock"] is False
