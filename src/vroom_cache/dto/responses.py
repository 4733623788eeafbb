"""Response DTOs for API endpoints."""

from pydantic import BaseModel, Field

from vroom_cache.entities import HealthProbeResult, HealthReport


class HealthProbeItem(BaseModel):
    """Result of one health probe."""

    service: str = Field(..., description="Probed service: vroom, redis or osrm")
    profile: str | None = Field(None, description="Routing profile, for per-profile probes")
    target: str = Field(..., description="URL that was probed")
    status: int = Field(..., description="HTTP status, or 0 when no HTTP response was received", ge=0)
    ok: bool = Field(..., description="Whether the probe passed")
    message: str = Field(..., description="Human-readable detail")

    @classmethod
    def from_entity(cls, probe: HealthProbeResult) -> "HealthProbeItem":
        return cls(
            service=probe.service,
            profile=probe.profile,
            target=probe.target,
            status=probe.status,
            ok=probe.ok,
            message=probe.message,
        )


class HealthServices(BaseModel):
    """Probe results grouped by dependency."""

    vroom: list[HealthProbeItem] = Field(default_factory=list, description="One probe per optimizer profile")
    cache: HealthProbeItem = Field(..., description="Cache store liveness")
    osrm: list[HealthProbeItem] = Field(default_factory=list, description="One probe per routing backend")


class HealthCheckResponse(BaseModel):
    """Response DTO for the composite health check."""

    ok: bool = Field(..., description="True only when every probe passed")
    services: HealthServices

    @classmethod
    def from_report(cls, report: HealthReport) -> "HealthCheckResponse":
        return cls(
            ok=report.ok,
            services=HealthServices(
                vroom=[HealthProbeItem.from_entity(p) for p in report.optimizer],
                cache=HealthProbeItem.from_entity(report.cache),
                osrm=[HealthProbeItem.from_entity(p) for p in report.routing],
            ),
        )


class ErrorResponse(BaseModel):
    """Error body returned when the proxy itself cannot answer."""

    error: str = Field(..., description="Human-readable error")
    code: str | None = Field(None, description="Machine-readable transport failure code")
