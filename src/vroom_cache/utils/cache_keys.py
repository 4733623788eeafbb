"""Cache key derivation for optimization requests.

Keys are ``<namespace>:<md5 hex>`` over the compact JSON form of the
request body. Object field order is part of the key unless canonical
mode is enabled.
"""

import hashlib
import json
from typing import Any

DEFAULT_NAMESPACE = "vroom"


def serialize_body(body: Any, canonical: bool = False) -> bytes:
    """Serialize a request body to the bytes that are hashed and forwarded.

    Args:
        body: Any JSON-serializable value
        canonical: Sort object keys recursively before serializing

    Returns:
        Compact UTF-8 JSON

    Raises:
        TypeError: If the body contains non-JSON values
        ValueError: If the body contains NaN/Infinity or circular references
    """
    return json.dumps(
        body,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
        sort_keys=canonical,
    ).encode("utf-8")


def derive_cache_key(
    body: Any,
    namespace: str = DEFAULT_NAMESPACE,
    canonical: bool = False,
) -> str:
    """Map a request body to its cache key.

    Args:
        body: Any JSON-serializable value
        namespace: Prefix separating these keys from others in a shared store
        canonical: Sort object keys so reordered bodies share a key

    Returns:
        The cache key
    """
    digest = hashlib.md5(serialize_body(body, canonical), usedforsecurity=False).hexdigest()
    return f"{namespace}:{digest}"


class CacheKeyDeriver:
    """Key derivation bound to a namespace and serialization mode."""

    def __init__(self, namespace: str = DEFAULT_NAMESPACE, canonical: bool = False) -> None:
        self.namespace = namespace
        self.canonical = canonical

    def derive(self, body: Any) -> str:
        """Derive the cache key for a request body."""
        return derive_cache_key(body, namespace=self.namespace, canonical=self.canonical)
