"""Utility modules for the VROOM cache proxy."""

from .cache_keys import CacheKeyDeriver, derive_cache_key, serialize_body

__all__ = [
    "CacheKeyDeriver",
    "derive_cache_key",
    "serialize_body",
]
