"""Health aggregation across the cache, VROOM and OSRM.

Every probe runs concurrently with its own timeout and never raises;
a failure becomes a non-ok HealthProbeResult.
"""

import asyncio
from collections.abc import Awaitable, Callable

import httpx
from loguru import logger

from vroom_cache.config import settings
from vroom_cache.entities import HealthProbeResult, HealthReport
from vroom_cache.protocols import CacheStore
from vroom_cache.repositories.redis_repository import PONG
from vroom_cache.services.forwarder import transport_failure_code

# Fixed [lon, lat] pair used by synthetic queries
PROBE_START = (2.3522, 48.8566)
PROBE_END = (2.2945, 48.8584)


def optimizer_probe_body(profile: str) -> dict:
    """Minimal VROOM problem: one vehicle of ``profile`` and one job."""
    return {
        "vehicles": [
            {"id": 1, "profile": profile, "start": list(PROBE_START), "end": list(PROBE_START)},
        ],
        "jobs": [{"id": 1, "location": list(PROBE_END)}],
    }


def routing_probe_url(base_url: str, profile: str) -> str:
    """OSRM route query between the fixed probe coordinates."""
    coordinates = f"{PROBE_START[0]},{PROBE_START[1]};{PROBE_END[0]},{PROBE_END[1]}"
    return f"{base_url.rstrip('/')}/route/v1/{profile}/{coordinates}?overview=false"


def http_probe_result(service: str, profile: str | None, target: str, status: int) -> HealthProbeResult:
    """Classify an HTTP response: anything below 400 counts as reachable."""
    ok = status < 400
    if ok:
        message = "reachable"
    elif status >= 500:
        message = f"server error (HTTP {status})"
    else:
        message = f"request rejected (HTTP {status})"
    return HealthProbeResult(
        service=service, profile=profile, target=target, status=status, ok=ok, message=message
    )


class HealthService:
    """Fan-out health checks for the proxy and its dependencies.

    Three groups are probed concurrently:
    - VROOM, one synthetic optimization per configured profile
    - Redis, a single PING
    - OSRM, one synthetic route query per configured backend

    Nothing is cached between calls to ``check_all``.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        store: CacheStore,
        vroom_url: str | None = None,
        vroom_profiles: list[str] | None = None,
        osrm_urls: dict[str, str] | None = None,
        probe_timeout: float | None = None,
    ) -> None:
        """Initialize the health service.

        Args:
            client: Shared async HTTP client (required).
            store: Cache store to ping (required).
            vroom_url: Optimizer URL, the same one live traffic uses. Defaults to settings.
            vroom_profiles: Optimizer profiles to probe. Defaults to settings.
            osrm_urls: Routing backends keyed by profile. Defaults to settings.
            probe_timeout: Per-probe bound in seconds. Defaults to settings.
        """
        self._client = client
        self._store = store
        self._vroom_url = vroom_url or settings.vroom_url
        self._vroom_profiles = settings.vroom_profiles if vroom_profiles is None else vroom_profiles
        self._osrm_urls = settings.osrm_urls if osrm_urls is None else osrm_urls
        self._timeout = probe_timeout or settings.health_probe_timeout

    async def check_all(self) -> HealthReport:
        """Run every probe and join the results.

        Returns:
            HealthReport whose ``ok`` is the AND over every probe
        """
        optimizer, cache, routing = await asyncio.gather(
            self.check_optimizer(),
            self.check_cache(),
            self.check_routing(),
        )
        report = HealthReport(cache=cache, optimizer=optimizer, routing=routing)
        if not report.ok:
            failing = [f"{p.service}:{p.profile or '-'}" for p in report.probes if not p.ok]
            logger.warning(f"Health check failing for {', '.join(failing)}")
        return report

    async def check_optimizer(self) -> list[HealthProbeResult]:
        """Probe VROOM once per profile."""
        return list(
            await asyncio.gather(*(self._probe_optimizer(profile) for profile in self._vroom_profiles))
        )

    async def check_routing(self) -> list[HealthProbeResult]:
        """Probe each OSRM backend."""
        return list(
            await asyncio.gather(
                *(self._probe_routing(profile, url) for profile, url in self._osrm_urls.items())
            )
        )

    async def check_cache(self) -> HealthProbeResult:
        """PING the cache store; healthy only on PONG."""
        target = self._store.target

        async def ping() -> HealthProbeResult:
            token = await self._store.ping()
            ok = token == PONG
            return HealthProbeResult(
                service="redis",
                profile=None,
                target=target,
                status=0,
                ok=ok,
                message=token if ok else f"unexpected ping reply {token!r}",
            )

        return await self._bounded("redis", None, target, ping)

    async def _probe_optimizer(self, profile: str) -> HealthProbeResult:
        async def call() -> HealthProbeResult:
            response = await self._client.post(
                self._vroom_url, json=optimizer_probe_body(profile), timeout=self._timeout
            )
            return http_probe_result("vroom", profile, self._vroom_url, response.status_code)

        return await self._bounded("vroom", profile, self._vroom_url, call)

    async def _probe_routing(self, profile: str, base_url: str) -> HealthProbeResult:
        url = routing_probe_url(base_url, profile)

        async def call() -> HealthProbeResult:
            response = await self._client.get(url, timeout=self._timeout)
            return http_probe_result("osrm", profile, url, response.status_code)

        return await self._bounded("osrm", profile, url, call)

    async def _bounded(
        self,
        service: str,
        profile: str | None,
        target: str,
        probe: Callable[[], Awaitable[HealthProbeResult]],
    ) -> HealthProbeResult:
        """Run a probe under the hard timeout, converting any failure to a result."""

        def failed(message: str) -> HealthProbeResult:
            return HealthProbeResult(
                service=service, profile=profile, target=target, status=0, ok=False, message=message
            )

        try:
            return await asyncio.wait_for(probe(), timeout=self._timeout)
        except asyncio.TimeoutError:
            return failed(f"ETIMEDOUT: no answer within {self._timeout:g}s")
        except httpx.TransportError as e:
            return failed(f"{transport_failure_code(e)}: {str(e) or type(e).__name__}")
        except Exception as e:
            logger.warning(f"{service} probe failed: {e!r}")
            return failed(f"{type(e).__name__}: {e}")
