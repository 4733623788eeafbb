"""Domain entities for internal representation.

These are pure dataclasses (frozen) used internally by services
and repositories. They are NOT used for API contracts - use DTOs
from the dto package for that.
"""

from .cache_lookup import CacheLookup, LookupStatus
from .forward_outcome import (
    ForwardOutcome,
    ForwardSuccess,
    TransportFailure,
    UnexpectedFailure,
    UpstreamError,
)
from .health import HealthProbeResult, HealthReport
from .proxy_result import CacheDisposition, ProxyResult

__all__ = [
    "CacheDisposition",
    "CacheLookup",
    "ForwardOutcome",
    "ForwardSuccess",
    "HealthProbeResult",
    "HealthReport",
    "LookupStatus",
    "ProxyResult",
    "TransportFailure",
    "UnexpectedFailure",
    "UpstreamError",
]
