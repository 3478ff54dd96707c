from __future__ import annotations

import base64
from collections.abc import Mapping
from typing import Any

import orjson

ORJSON_OPTIONS = orjson.OPT_SORT_KEYS | orjson.OPT_NON_STR_KEYS | orjson.OPT_UTC_Z


def normalize_filters(filters: Mapping[str, Any]) -> dict[str, Any]:
    """Drop entries whose value is None.

    An explicit None and a missing key are the same filter set.
    """
    return {name: value for name, value in filters.items() if value is not None}


def canonical_bytes(data: Any) -> bytes:
    """Return canonical JSON bytes with lexicographically sorted keys.

    Raises TypeError for values orjson cannot serialize.
    """
    return orjson.dumps(data, option=ORJSON_OPTIONS)


def encode_b64url(raw: bytes) -> str:
    """Encode bytes to Base64URL without padding."""
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def decode_b64url(value: str) -> bytes:
    """Decode unpadded Base64URL."""
    padded = value + "=" * ((4 - len(value) % 4) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii"))
