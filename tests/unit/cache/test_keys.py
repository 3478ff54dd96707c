"""Tests for cache key generation."""

import base64

import orjson
import pytest

from catalog.cache.keys import CacheCategory, CacheKeys, TtlPolicy
from catalog.config import CacheConfig


class TestCacheKeys:
    """Test cache key generation."""

    def test_product_key(self) -> None:
        """Product key has correct format."""
        assert CacheKeys("product_api").product_key(42) == "product_api:product:42"

    def test_default_prefix(self) -> None:
        """Default prefix is product_api."""
        assert CacheKeys().product_key(1).startswith("product_api:")

    def test_facet_key(self) -> None:
        """Categories facet has no discriminator."""
        assert CacheKeys("shop").facet_key() == "shop:categories"

    def test_listing_key_is_base64url_of_canonical_json(self) -> None:
        """Listing discriminator encodes the sorted filter JSON."""
        key = CacheKeys("shop").listing_key({"limit": 10, "category": "books"})
        expected = base64.urlsafe_b64encode(b'{"category":"books","limit":10}')
        assert key == f"shop:listing:{expected.decode('ascii').rstrip('=')}"

    def test_listing_key_ignores_insertion_order(self) -> None:
        """Equal filter sets produce equal keys."""
        keys = CacheKeys()
        first = keys.listing_key({"category": "books", "price_min": 5, "limit": 10})
        second = keys.listing_key({"limit": 10, "price_min": 5, "category": "books"})
        assert first == second

    def test_listing_key_sorts_nested_maps(self) -> None:
        """Nested mappings are sorted too."""
        keys = CacheKeys()
        assert keys.listing_key({"range": {"b": 2, "a": 1}}) == keys.listing_key(
            {"range": {"a": 1, "b": 2}}
        )

    def test_listing_key_none_equals_absent(self) -> None:
        """An explicit None filter is the same as a missing one."""
        keys = CacheKeys()
        assert keys.listing_key({"category": None, "limit": 10}) == keys.listing_key(
            {"limit": 10}
        )

    def test_different_filters_produce_different_keys(self) -> None:
        """Distinct filter sets never share a key."""
        keys = CacheKeys()
        variants = [
            {},
            {"limit": 10},
            {"limit": 20},
            {"offset": 10},
            {"category": "books"},
            {"category": "Books"},
            {"search": "a:b"},
            {"search": "a"},
            {"in_stock": True},
            {"in_stock": False},
            {"price_min": 1},
            {"price_min": "1"},
        ]
        generated = {keys.listing_key(v) for v in variants}
        assert len(generated) == len(variants)

    def test_listing_key_has_no_separator_in_discriminator(self) -> None:
        """Search text with ':' cannot break the key syntax."""
        key = CacheKeys("shop").listing_key({"search": "a:b:c"})
        assert key.count(":") == 2

    def test_empty_filters_are_valid(self) -> None:
        """Empty filter set produces a stable key."""
        keys = CacheKeys()
        assert keys.listing_key({}) == keys.listing_key({})

    def test_unserializable_filter_raises(self) -> None:
        """Key encoding errors are fatal."""
        with pytest.raises(TypeError):
            CacheKeys().listing_key({"bad": object()})

    def test_category_patterns(self) -> None:
        """Patterns cover exactly one category."""
        keys = CacheKeys("shop")
        assert keys.category_pattern(CacheCategory.PRODUCT) == "shop:product:*"
        assert keys.category_pattern(CacheCategory.LISTING) == "shop:listing:*"
        assert keys.category_pattern(CacheCategory.CATEGORIES) == "shop:categories"
        assert keys.namespace_pattern() == "shop:*"

    @pytest.mark.parametrize("prefix", ["", "shop*", "sh?p", "shop[12]", "a:b", "back\\slash"])
    def test_prefix_with_glob_metacharacters_is_rejected(self, prefix: str) -> None:
        """A prefix that could match other namespaces is refused."""
        with pytest.raises(ValueError, match="Invalid cache prefix"):
            CacheKeys(prefix)


class TestParseKey:
    """Test cache key parsing."""

    def test_parse_product_key(self) -> None:
        """Product key is parsed correctly."""
        result = CacheKeys("shop").parse_key("shop:product:7")
        assert result == {"prefix": "shop", "category": "product", "discriminator": "7"}

    def test_parse_listing_key_decodes_filters(self) -> None:
        """Listing key round-trips its filters."""
        keys = CacheKeys("shop")
        result = keys.parse_key(keys.listing_key({"category": "books", "limit": 5}))
        assert result is not None
        assert result["category"] == "listing"
        assert result["filters"] == {"category": "books", "limit": 5}

    def test_parse_facet_key(self) -> None:
        """Categories facet key is parsed correctly."""
        result = CacheKeys("shop").parse_key("shop:categories")
        assert result is not None
        assert result["category"] == "categories"

    @pytest.mark.parametrize(
        "key",
        [
            "invalid",
            "other:product:1",
            "shop:unknown:1",
            "shop:product:",
            "shop:listing:!!!",
        ],
    )
    def test_parse_invalid_key_returns_none(self, key: str) -> None:
        """Keys outside the schema return None."""
        assert CacheKeys("shop").parse_key(key) is None

    def test_decoded_discriminator_matches_canonical_bytes(self) -> None:
        """Discriminator is plain canonical JSON once decoded."""
        keys = CacheKeys("shop")
        token = keys.listing_key({"b": 1, "a": 2}).split(":")[-1]
        raw = base64.urlsafe_b64decode(token + "=" * (-len(token) % 4))
        assert raw == orjson.dumps({"a": 2, "b": 1}, option=orjson.OPT_SORT_KEYS)


class TestTtlPolicy:
    """Test TTL selection per category."""

    def test_defaults(self) -> None:
        """Defaults match the documented TTLs."""
        policy = TtlPolicy()
        assert policy.ttl_for(CacheCategory.PRODUCT) == 600
        assert policy.ttl_for(CacheCategory.LISTING) == 300
        assert policy.ttl_for(CacheCategory.CATEGORIES) == 600

    def test_from_config(self) -> None:
        """Categories use the general cache TTL."""
        config = CacheConfig(ttl=60, product_ttl=120, listing_ttl=30)
        policy = TtlPolicy.from_config(config)
        assert policy.ttl_for(CacheCategory.PRODUCT) == 120
        assert policy.ttl_for(CacheCategory.LISTING) == 30
        assert policy.ttl_for(CacheCategory.CATEGORIES) == 60
