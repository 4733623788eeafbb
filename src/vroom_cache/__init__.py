"""VROOM Cache - caching pass-through proxy for route optimization.

Identical optimization requests are answered from Redis; everything
else is forwarded to VROOM and successful answers are cached for an hour.

Layers:
    - protocols: Interface contracts (CacheStore)
    - repositories: Data access implementations (Redis)
    - services: Business logic (forwarding, cache-aside, health)
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)

For HTTP API:
    ```python
    from vroom_cache.api.app import app
    ```
"""

from vroom_cache.config import get_http_client, get_redis_client, settings
from vroom_cache.entities import (
    CacheDisposition,
    ForwardOutcome,
    HealthProbeResult,
    HealthReport,
    ProxyResult,
)
from vroom_cache.handlers import ProxyHandler
from vroom_cache.protocols import CacheStore
from vroom_cache.repositories import RedisCacheRepository
from vroom_cache.services import HealthService, ProxyService, VroomForwarder
from vroom_cache.utils import derive_cache_key

__all__ = [
    # Configuration
    "settings",
    "get_redis_client",
    "get_http_client",
    # Protocols (interfaces)
    "CacheStore",
    # Services (business logic)
    "ProxyService",
    "HealthService",
    "VroomForwarder",
    "derive_cache_key",
    # Handlers (HTTP)
    "ProxyHandler",
    # Repositories (data access)
    "RedisCacheRepository",
    # Entities (domain models)
    "CacheDisposition",
    "ForwardOutcome",
    "HealthProbeResult",
    "HealthReport",
    "ProxyResult",
]
