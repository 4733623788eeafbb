"""Cache lookup domain entity."""

from dataclasses import dataclass
from enum import Enum


class LookupStatus(str, Enum):
    """Outcome of reading a key from the cache store."""

    HIT = "hit"
    MISS = "miss"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class CacheLookup:
    """Tri-state result of a cache read.

    Attributes:
        key: The cache key that was read
        status: HIT, MISS, or UNAVAILABLE when the store could not be reached
        value: Cached bytes, only set on HIT
    """

    key: str
    status: LookupStatus
    value: bytes | None = None

    @property
    def is_hit(self) -> bool:
        """Collapse to the binary hit/miss seen by the request path."""
        return self.status is LookupStatus.HIT
