"""Health check domain entities."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class HealthProbeResult:
    """Result of a single synthetic probe.

    Attributes:
        service: Probed service name ("vroom", "osrm", "redis")
        profile: Routing profile for per-profile probes, None otherwise
        target: URL that was probed (credentials redacted)
        status: HTTP status, or 0 when there was no HTTP response
        ok: Whether the probe counts as healthy
        message: Human-readable detail
    """

    service: str
    profile: str | None
    target: str
    status: int
    ok: bool
    message: str


@dataclass(frozen=True)
class HealthReport:
    """Composite health of the cache and every backend."""

    cache: HealthProbeResult
    optimizer: list[HealthProbeResult] = field(default_factory=list)
    routing: list[HealthProbeResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True only when every probe is healthy."""
        return all(probe.ok for probe in self.probes)

    @property
    def probes(self) -> list[HealthProbeResult]:
        """All probe results, optimizer first, then cache, then routing."""
        return [*self.optimizer, self.cache, *self.routing]
