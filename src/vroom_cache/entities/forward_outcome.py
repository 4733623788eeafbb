"""Forward outcome domain entities.

Exactly one of these is produced per call to the upstream optimizer.
"""

from dataclasses import dataclass

DEFAULT_CONTENT_TYPE = "application/json"


@dataclass(frozen=True)
class ForwardSuccess:
    """Upstream answered with status 200.

    Attributes:
        status_code: Always 200
        body: Raw response bytes, relayed verbatim
        content_type: Upstream Content-Type header
    """

    status_code: int
    body: bytes
    content_type: str = DEFAULT_CONTENT_TYPE


@dataclass(frozen=True)
class UpstreamError:
    """Upstream was reachable but answered with a non-200 status.

    Attributes:
        status_code: The upstream's own status
        body: Raw response bytes, relayed verbatim
        content_type: Upstream Content-Type header
    """

    status_code: int
    body: bytes
    content_type: str = DEFAULT_CONTENT_TYPE


@dataclass(frozen=True)
class TransportFailure:
    """Upstream never answered (refused, unresolvable, timed out).

    Attributes:
        code: Machine-readable failure code such as ECONNREFUSED or ETIMEDOUT
        message: Human-readable detail, for logs only
    """

    code: str
    message: str = ""


@dataclass(frozen=True)
class UnexpectedFailure:
    """Any other failure while preparing or performing the call."""

    message: str


ForwardOutcome = ForwardSuccess | UpstreamError | TransportFailure | UnexpectedFailure
