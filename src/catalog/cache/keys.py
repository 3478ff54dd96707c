"""Cache key schema for the catalog API.

Key format: {prefix}:{category}:{discriminator}

Where:
- prefix: configurable namespace (default "product_api")
- category: "product", "listing" or "categories"
- discriminator: product id for "product", Base64URL of the canonical
  filter JSON for "listing"; the categories facet has no discriminator
  and lives at "{prefix}:categories"
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

import orjson

from catalog.config import CacheConfig
from catalog.core.canonicalize import (
    canonical_bytes,
    decode_b64url,
    encode_b64url,
    normalize_filters,
)

# Glob metacharacters plus the key separator
_RESERVED_PREFIX_CHARS = "*?[]\\:"


class CacheCategory(str, Enum):
    """Cache namespaces with independent TTLs."""

    PRODUCT = "product"
    LISTING = "listing"
    CATEGORIES = "categories"


@dataclass(frozen=True)
class TtlPolicy:
    """Static category -> TTL (seconds) table. No per-key override."""

    product: int = 600
    listing: int = 300
    categories: int = 600

    @classmethod
    def from_config(cls, config: CacheConfig) -> TtlPolicy:
        return cls(
            product=config.product_ttl,
            listing=config.listing_ttl,
            categories=config.ttl,
        )

    def ttl_for(self, category: CacheCategory) -> int:
        if category is CacheCategory.PRODUCT:
            return self.product
        if category is CacheCategory.LISTING:
            return self.listing
        return self.categories


class CacheKeys:
    """Cache key generator following a consistent naming convention.

    The prefix is spliced into glob patterns for pattern deletes, so it may
    not contain glob metacharacters or the ":" separator.
    """

    def __init__(self, prefix: str = "product_api") -> None:
        if not prefix or any(char in prefix for char in _RESERVED_PREFIX_CHARS):
            raise ValueError(
                f"Invalid cache prefix {prefix!r}: must be non-empty and must not contain "
                f"any of {_RESERVED_PREFIX_CHARS!r}"
            )
        self.prefix = prefix

    def product_key(self, product_id: int | str) -> str:
        """Key for a single product."""
        return f"{self.prefix}:{CacheCategory.PRODUCT.value}:{product_id}"

    def listing_key(self, filters: Mapping[str, Any]) -> str:
        """Key for a product listing query.

        Filters are normalized (None dropped) and serialized with sorted keys,
        so insertion order never changes the key. Base64URL keeps search text
        from breaking the ':' separated key syntax.
        """
        token = encode_b64url(canonical_bytes(normalize_filters(filters)))
        return f"{self.prefix}:{CacheCategory.LISTING.value}:{token}"

    def facet_key(self, facet: str = CacheCategory.CATEGORIES.value) -> str:
        """Key for an aggregate facet (only "categories" exists today)."""
        return f"{self.prefix}:{facet}"

    def category_pattern(self, category: CacheCategory) -> str:
        """Glob matching every key of a category.

        The categories facet is a single key, so its pattern is the key itself.
        """
        if category is CacheCategory.CATEGORIES:
            return self.facet_key()
        return f"{self.prefix}:{category.value}:*"

    def namespace_pattern(self) -> str:
        """Glob matching every key under the prefix."""
        return f"{self.prefix}:*"

    def parse_key(self, key: str) -> dict[str, Any] | None:
        """Parse a cache key into its components.

        Returns None if the key doesn't belong to this namespace.
        """
        head, sep, rest = key.partition(":")
        if not sep or head != self.prefix:
            return None

        category, _, discriminator = rest.partition(":")
        if category == CacheCategory.CATEGORIES.value and not discriminator:
            return {"prefix": head, "category": category, "discriminator": ""}
        if category not in (CacheCategory.PRODUCT.value, CacheCategory.LISTING.value):
            return None
        if not discriminator:
            return None

        parsed: dict[str, Any] = {
            "prefix": head,
            "category": category,
            "discriminator": discriminator,
        }
        if category == CacheCategory.LISTING.value:
            try:
                parsed["filters"] = orjson.loads(decode_b64url(discriminator))
            except ValueError:
                return None
        return parsed
