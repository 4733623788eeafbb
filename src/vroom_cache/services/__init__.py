"""Service layer for business logic.

Services depend on protocols (interfaces) and injected clients, not on
process-wide singletons, which keeps them testable with fakes.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)
"""

from .forwarder import VroomForwarder
from .health_service import HealthService
from .proxy_service import ProxyService

__all__ = [
    "HealthService",
    "ProxyService",
    "VroomForwarder",
]
