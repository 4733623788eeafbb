"""Repository layer for data access.

This layer hides Redis behind the CacheStore protocol. The
repositories are protocol-based (structural typing), not
inheritance-based.
"""

from vroom_cache.protocols import CacheStore

from .redis_repository import RedisCacheRepository

__all__ = [
    "CacheStore",
    "RedisCacheRepository",
]
