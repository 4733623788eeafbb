"""HTTP handlers for the proxy endpoints.

Handlers turn service results into HTTP responses. They handle HTTP
concerns like status codes, headers and the last-resort error mapping.
"""

from typing import Any

from fastapi import Response
from loguru import logger

from vroom_cache.dto import HealthCheckResponse
from vroom_cache.entities import ProxyResult
from vroom_cache.services import HealthService, ProxyService
from vroom_cache.services.proxy_service import internal_error_result

CACHE_HEADER = "X-Cache"


class ProxyHandler:
    """HTTP handlers for proxying and health.

    Example:
        ```python
        handler = ProxyHandler(proxy_service=proxy, health_service=health)

        @app.post("/")
        async def optimize(body: Any = Body(...)) -> Response:
            return await handler.optimize(body)
        ```
    """

    def __init__(self, proxy_service: ProxyService, health_service: HealthService) -> None:
        """Initialize the proxy handler.

        Args:
            proxy_service: Cache-aside service (required).
            health_service: Health aggregation service (required).
        """
        self._proxy = proxy_service
        self._health = health_service

    async def optimize(self, body: Any) -> Response:
        """Handle POST / requests.

        Args:
            body: Parsed JSON request body

        Returns:
            Upstream (or cached) status and body with an X-Cache header
        """
        try:
            result = await self._proxy.handle(body)
        except Exception as e:
            logger.exception(f"Error: {e}")
            result = internal_error_result()
        return self.to_response(result)

    async def health_check(self) -> HealthCheckResponse:
        """Handle GET /health requests.

        Returns:
            Composite report; probe failures show up as ok=false, never as errors
        """
        report = await self._health.check_all()
        return HealthCheckResponse.from_report(report)

    @staticmethod
    def to_response(result: ProxyResult) -> Response:
        return Response(
            content=result.body,
            status_code=result.status_code,
            media_type=result.media_type,
            headers={CACHE_HEADER: result.disposition.value},
        )
