"""Forwarder to the upstream VROOM optimizer.

Sends one POST per request and reports the result as a ForwardOutcome.
HTTP status codes are data here, never a reason to raise.
"""

import asyncio
import errno
import socket
from typing import Any

import httpx
from loguru import logger

from vroom_cache.config import settings
from vroom_cache.entities import (
    ForwardOutcome,
    ForwardSuccess,
    TransportFailure,
    UnexpectedFailure,
    UpstreamError,
)
from vroom_cache.entities.forward_outcome import DEFAULT_CONTENT_TYPE
from vroom_cache.utils import serialize_body

# Most specific first
_TRANSPORT_CODES: tuple[tuple[type[httpx.TransportError], str], ...] = (
    (httpx.TimeoutException, "ETIMEDOUT"),
    (httpx.ConnectError, "ECONNREFUSED"),
    (httpx.ReadError, "ECONNRESET"),
    (httpx.WriteError, "ECONNRESET"),
    (httpx.RemoteProtocolError, "ECONNRESET"),
)


def transport_failure_code(exc: BaseException) -> str:
    """Derive a machine-readable code for a transport-level failure.

    The OS error behind the httpx exception is preferred (e.g. ECONNREFUSED,
    ENOTFOUND for resolver errors); otherwise the httpx exception type decides.

    Args:
        exc: The exception raised by the HTTP client

    Returns:
        An errno-style code
    """
    cause: BaseException | None = exc
    seen: set[int] = set()
    while cause is not None and id(cause) not in seen:
        seen.add(id(cause))
        if isinstance(cause, socket.gaierror):
            return "ENOTFOUND"
        if isinstance(cause, OSError) and cause.errno in errno.errorcode:
            return errno.errorcode[cause.errno]
        cause = cause.__cause__ or cause.__context__

    for exc_type, code in _TRANSPORT_CODES:
        if isinstance(exc, exc_type):
            return code
    return "ETRANSPORT"


class VroomForwarder:
    """Relays optimization requests to VROOM.

    Example:
        ```python
        async with httpx.AsyncClient() as client:
            forwarder = VroomForwarder(client, url="http://vroom:3000")
            outcome = await forwarder.forward({"jobs": [...], "vehicles": [...]})
        ```
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        url: str | None = None,
        timeout: float | None = None,
        canonical: bool = False,
    ) -> None:
        """Initialize the forwarder.

        Args:
            client: Shared async HTTP client (required).
            url: Upstream endpoint. Defaults to settings.vroom_url.
            timeout: Bound on the whole call in seconds. Defaults to settings.
            canonical: Serialize with sorted keys, matching canonical cache keys.
        """
        self._client = client
        self._url = url or settings.vroom_url
        self._timeout = timeout or settings.upstream_timeout
        self._canonical = canonical

    @property
    def url(self) -> str:
        """The upstream endpoint requests are sent to."""
        return self._url

    async def forward(self, body: Any) -> ForwardOutcome:
        """Send a request body upstream.

        Args:
            body: The client's request body (any JSON value)

        Returns:
            ForwardSuccess for 200, UpstreamError for any other status,
            TransportFailure when no response arrived, UnexpectedFailure otherwise.
        """
        try:
            payload = serialize_body(body, canonical=self._canonical)
            # httpx timeouts are per phase; wait_for bounds the whole exchange
            response = await asyncio.wait_for(
                self._client.post(
                    self._url,
                    content=payload,
                    headers={"Content-Type": "application/json"},
                    timeout=self._timeout,
                ),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            message = f"no complete answer within {self._timeout:g}s"
            logger.error(f"Request error: ETIMEDOUT ({message}) url={self._url} method=POST")
            return TransportFailure(code="ETIMEDOUT", message=message)
        except httpx.TransportError as e:
            code = transport_failure_code(e)
            logger.error(f"Request error: {code} ({e!r}) url={self._url} method=POST")
            return TransportFailure(code=code, message=str(e) or type(e).__name__)
        except Exception as e:
            logger.exception(f"Unexpected error forwarding to {self._url}: {e}")
            return UnexpectedFailure(message=str(e) or type(e).__name__)

        content_type = response.headers.get("content-type", DEFAULT_CONTENT_TYPE)
        if response.status_code == 200:
            return ForwardSuccess(
                status_code=response.status_code,
                body=response.content,
                content_type=content_type,
            )

        logger.warning(
            f"Upstream error: status={response.status_code} "
            f"reason={response.reason_phrase!r} url={self._url} method=POST"
        )
        return UpstreamError(
            status_code=response.status_code,
            body=response.content,
            content_type=content_type,
        )
