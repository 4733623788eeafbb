"""Redis implementation of CacheStore.

Plain string keys written with SET ... EX so Redis owns expiration.
It's the default implementation and satisfies the CacheStore protocol.
"""

import redis.asyncio as redis

from vroom_cache.config import Settings, get_redis_client, redact_url, settings

PONG = "PONG"


class RedisCacheRepository:
    """Redis implementation of the cache store client contract.

    This class satisfies the CacheStore protocol through structural
    typing - no explicit inheritance needed.

    Errors from redis-py (``redis.exceptions.RedisError``, connection
    ``OSError``s, timeouts) are not caught here.
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        redis_url: str | None = None,
    ) -> None:
        """Initialize the Redis cache repository.

        Args:
            redis_client: Async Redis client instance. If None, creates default.
            redis_url: URL the client points at, used for reporting only.
        """
        self._client = redis_client or get_redis_client()
        self._target = redact_url(redis_url or settings.redis_url)

    @classmethod
    def create(cls, config: Settings | None = None) -> "RedisCacheRepository":
        """Factory method to create RedisCacheRepository from settings.

        Args:
            config: Settings to read the Redis URL from. If None, uses global settings.

        Returns:
            Configured RedisCacheRepository
        """
        config = config or settings
        return cls(redis_client=get_redis_client(config), redis_url=config.redis_url)

    @property
    def target(self) -> str:
        """Redis URL with credentials masked."""
        return self._target

    async def get(self, key: str) -> bytes | None:
        """Read a cached value.

        Args:
            key: The cache key

        Returns:
            Stored bytes, or None if the key is absent or expired
        """
        value = await self._client.get(key)
        if value is None:
            return None
        if isinstance(value, str):
            return value.encode()
        return value

    async def set(self, key: str, value: bytes, ttl: int) -> None:
        """Store a value that Redis expires after ``ttl`` seconds.

        Args:
            key: The cache key
            value: Serialized response body
            ttl: Time-to-live in seconds
        """
        await self._client.set(key, value, ex=ttl)

    async def ping(self) -> str:
        """Send PING.

        redis-py parses the PONG reply into True, so it is mapped back
        to the wire token here.

        Returns:
            "PONG" when Redis answered, otherwise the raw reply as text
        """
        reply = await self._client.ping()
        if reply is True:
            return PONG
        if isinstance(reply, bytes):
            return reply.decode()
        return str(reply)

    async def close(self) -> None:
        """Close the underlying connection pool."""
        await self._client.aclose()
