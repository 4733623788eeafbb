"""Cache storage protocol.

Defines the client contract the proxy needs from its key/value store.
Implementations raise on store failures; deciding what an outage means
for a request is left to the service layer.

Implementations can include:
- Redis (default)
- An in-memory store for tests
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class CacheStore(Protocol):
    """Protocol for cache storage backends.

    Similar to Go's interface pattern - any type that implements these
    methods satisfies the protocol, no explicit inheritance needed.

    Example:
        ```python
        from vroom_cache.protocols import CacheStore

        store: CacheStore = RedisCacheRepository.create()
        ```
    """

    @property
    def target(self) -> str:
        """Return a log-safe description of where the store lives."""
        ...

    async def get(self, key: str) -> bytes | None:
        """Read a value.

        Args:
            key: The cache key

        Returns:
            The stored bytes, or None if absent or expired
        """
        ...

    async def set(self, key: str, value: bytes, ttl: int) -> None:
        """Write a value with an expiration.

        Args:
            key: The cache key
            value: Bytes to store
            ttl: Time-to-live in seconds
        """
        ...

    async def ping(self) -> str:
        """Check liveness.

        Returns:
            The liveness token ("PONG" when healthy)
        """
        ...
