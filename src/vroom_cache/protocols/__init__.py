"""Protocol interfaces for swappable implementations.

Protocols enable:
- Swapping the cache backend without touching the services
- Unit testing with in-memory implementations
"""

from .cache_store import CacheStore

__all__ = [
    "CacheStore",
]
