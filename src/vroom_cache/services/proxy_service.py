"""Cache-aside service for optimization requests.

This service orchestrates one request by coordinating the key deriver,
the cache store and the forwarder. It owns the cache-or-forward decision
and the write-back policy.
"""

import asyncio
from typing import Any

from loguru import logger
from redis.exceptions import RedisError

from vroom_cache.config import settings
from vroom_cache.dto import ErrorResponse
from vroom_cache.entities import (
    CacheDisposition,
    CacheLookup,
    ForwardOutcome,
    ForwardSuccess,
    LookupStatus,
    ProxyResult,
    TransportFailure,
    UnexpectedFailure,
    UpstreamError,
)
from vroom_cache.entities.forward_outcome import DEFAULT_CONTENT_TYPE
from vroom_cache.protocols import CacheStore
from vroom_cache.services.forwarder import VroomForwarder
from vroom_cache.utils import CacheKeyDeriver

# Store errors that degrade the cache instead of failing the request
STORE_ERRORS = (RedisError, OSError, asyncio.TimeoutError)

BAD_GATEWAY_MESSAGE = "Bad gateway to VROOM"
INTERNAL_ERROR_MESSAGE = "Internal server error"
INVALID_BODY_MESSAGE = "Invalid JSON body"


def error_result(status_code: int, error: str, code: str | None = None) -> ProxyResult:
    """Proxy-generated error response (never cached)."""
    return ProxyResult(
        status_code=status_code,
        body=ErrorResponse(error=error, code=code).model_dump_json(exclude_none=True).encode("utf-8"),
        media_type=DEFAULT_CONTENT_TYPE,
        disposition=CacheDisposition.MISS,
    )


def internal_error_result() -> ProxyResult:
    """Generic 500 that reveals nothing about the failure."""
    return error_result(500, INTERNAL_ERROR_MESSAGE)


class ProxyService:
    """Cache-aside orchestration for the VROOM proxy.

    Only a ForwardSuccess with status 200 is written back. Upstream
    errors and transport failures are never cached.

    Example:
        ```python
        service = ProxyService.create(
            store=RedisCacheRepository.create(),
            forwarder=VroomForwarder(http_client),
        )
        result = await service.handle({"jobs": [...], "vehicles": [...]})
        result.disposition  # CacheDisposition.MISS on first call
        ```
    """

    def __init__(
        self,
        store: CacheStore,
        forwarder: VroomForwarder,
        key_deriver: CacheKeyDeriver | None = None,
        ttl: int | None = None,
        store_timeout: float | None = None,
    ) -> None:
        """Initialize the proxy service.

        Args:
            store: Cache storage backend (required).
            forwarder: Upstream forwarder (required).
            key_deriver: Cache key derivation. Defaults to settings prefix and mode.
            ttl: Write-back TTL in seconds. Defaults to settings.
            store_timeout: Bound on each cache read or write. Defaults to settings.
        """
        self._store = store
        self._forwarder = forwarder
        self._keys = key_deriver or CacheKeyDeriver(
            namespace=settings.cache_key_prefix,
            canonical=settings.cache_canonical_keys,
        )
        self._ttl = ttl or settings.cache_ttl
        self._store_timeout = store_timeout or settings.redis_timeout

    @classmethod
    def create(
        cls,
        store: CacheStore,
        forwarder: VroomForwarder,
        key_prefix: str | None = None,
        canonical_keys: bool | None = None,
        ttl: int | None = None,
        store_timeout: float | None = None,
    ) -> "ProxyService":
        """Factory method to create ProxyService with settings defaults.

        Args:
            store: Cache storage backend (required).
            forwarder: Upstream forwarder (required).
            key_prefix: Key namespace. If None, uses settings.
            canonical_keys: Sort body keys before hashing. If None, uses settings.
            ttl: Write-back TTL in seconds. If None, uses settings.
            store_timeout: Bound on each cache call. If None, uses settings.

        Returns:
            Configured ProxyService instance
        """
        key_deriver = CacheKeyDeriver(
            namespace=key_prefix or settings.cache_key_prefix,
            canonical=settings.cache_canonical_keys if canonical_keys is None else canonical_keys,
        )
        return cls(
            store=store,
            forwarder=forwarder,
            key_deriver=key_deriver,
            ttl=ttl,
            store_timeout=store_timeout,
        )

    async def handle(self, body: Any) -> ProxyResult:
        """Answer one optimization request from cache or upstream.

        Business logic:
        1. Derive the cache key; a body JSON cannot carry is a 400
        2. Look it up; a store outage counts as a miss
        3. On miss, forward upstream
        4. Write back 200 responses only
        5. Map the forward outcome to a client response

        Args:
            body: The request body (any JSON value)

        Returns:
            ProxyResult with status, body and cache disposition
        """
        try:
            key = self._keys.derive(body)
        except ValueError as e:
            logger.warning(f"Rejected request body: {e}")
            return error_result(400, INVALID_BODY_MESSAGE)

        lookup = await self.lookup(key)
        if lookup.is_hit and lookup.value is not None:
            logger.debug(f"Cache hit for {key}")
            return ProxyResult(
                status_code=200,
                body=lookup.value,
                media_type=DEFAULT_CONTENT_TYPE,
                disposition=CacheDisposition.HIT,
            )

        outcome = await self._forwarder.forward(body)

        if isinstance(outcome, ForwardSuccess) and outcome.status_code == 200:
            await self.store(key, outcome.body)

        return self.to_result(outcome)

    async def lookup(self, key: str) -> CacheLookup:
        """Read a key, reporting store failures as UNAVAILABLE.

        Args:
            key: The cache key

        Returns:
            CacheLookup with HIT, MISS or UNAVAILABLE
        """
        try:
            value = await asyncio.wait_for(self._store.get(key), timeout=self._store_timeout)
        except STORE_ERRORS as e:
            logger.warning(f"Failed to read {key} from cache, forwarding instead: {e!r}")
            return CacheLookup(key=key, status=LookupStatus.UNAVAILABLE)

        if not value:
            return CacheLookup(key=key, status=LookupStatus.MISS)
        return CacheLookup(key=key, status=LookupStatus.HIT, value=value)

    async def store(self, key: str, value: bytes) -> bool:
        """Write a response to the cache, ignoring store failures.

        Args:
            key: The cache key
            value: Response bytes

        Returns:
            True if the write succeeded
        """
        try:
            await asyncio.wait_for(self._store.set(key, value, self._ttl), timeout=self._store_timeout)
        except STORE_ERRORS as e:
            logger.warning(f"Failed to cache response for {key}: {e!r}")
            return False
        return True

    @staticmethod
    def to_result(outcome: ForwardOutcome) -> ProxyResult:
        """Map a forward outcome to the client response (always a MISS).

        Args:
            outcome: Result of the upstream call

        Returns:
            Passthrough for upstream responses, 502 for transport
            failures, 500 for anything else
        """
        if isinstance(outcome, (ForwardSuccess, UpstreamError)):
            return ProxyResult(
                status_code=outcome.status_code,
                body=outcome.body,
                media_type=outcome.content_type,
                disposition=CacheDisposition.MISS,
            )

        if isinstance(outcome, TransportFailure):
            return error_result(502, BAD_GATEWAY_MESSAGE, outcome.code or "ETRANSPORT")

        if not isinstance(outcome, UnexpectedFailure):
            logger.error(f"Unknown forward outcome: {outcome!r}")
        return internal_error_result()
