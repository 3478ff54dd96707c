"""Tests for canonical JSON and Base64URL helpers."""

import pytest

from catalog.core.canonicalize import (
    canonical_bytes,
    decode_b64url,
    encode_b64url,
    normalize_filters,
)


class TestNormalizeFilters:
    """Test filter normalization."""

    def test_drops_none(self) -> None:
        """None values are removed."""
        assert normalize_filters({"a": None, "b": 1}) == {"b": 1}

    def test_keeps_falsy_values(self) -> None:
        """False, 0 and empty strings are real filters."""
        assert normalize_filters({"a": False, "b": 0, "c": ""}) == {"a": False, "b": 0, "c": ""}


class TestCanonicalBytes:
    """Test canonical serialization."""

    def test_sorted_keys(self) -> None:
        """Keys are sorted at every level."""
        assert canonical_bytes({"b": {"d": 1, "c": 2}, "a": 1}) == b'{"a":1,"b":{"c":2,"d":1}}'

    def test_unserializable_raises_type_error(self) -> None:
        """Unsupported values raise TypeError."""
        with pytest.raises(TypeError):
            canonical_bytes({"x": object()})


class TestBase64Url:
    """Test unpadded Base64URL."""

    def test_no_padding_or_unsafe_chars(self) -> None:
        """Output uses only the URL-safe alphabet."""
        encoded = encode_b64url(b"\xfb\xff\xfe?")
        assert "=" not in encoded
        assert "+" not in encoded and "/" not in encoded

    @pytest.mark.parametrize("raw", [b"", b"a", b"ab", b"abc", b'{"search":"a:b"}'])
    def test_decode_restores_input(self, raw: bytes) -> None:
        """Decoding handles every padding length."""
        assert decode_b64url(encode_b64url(raw)) == raw
