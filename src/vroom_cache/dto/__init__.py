"""Data Transfer Objects for API contracts.

These Pydantic models define the external API contract of the proxy's
own endpoints. Proxied optimization bodies are opaque and have no DTO.

Internal domain logic should use entities from the entities package.
"""

from .responses import ErrorResponse, HealthCheckResponse, HealthProbeItem, HealthServices

__all__ = [
    "ErrorResponse",
    "HealthCheckResponse",
    "HealthProbeItem",
    "HealthServices",
]
