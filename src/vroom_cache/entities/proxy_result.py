"""Proxy result domain entity."""

from dataclasses import dataclass
from enum import Enum


class CacheDisposition(str, Enum):
    """Value of the X-Cache response header."""

    HIT = "HIT"
    MISS = "MISS"


@dataclass(frozen=True)
class ProxyResult:
    """HTTP-shaped answer to one optimization request.

    Attributes:
        status_code: Status returned to the client
        body: Response bytes
        media_type: Response Content-Type
        disposition: Whether the body came from the cache
    """

    status_code: int
    body: bytes
    media_type: str
    disposition: CacheDisposition
