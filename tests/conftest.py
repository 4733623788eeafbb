"""Shared fixtures and fakes for the proxy tests."""

import asyncio
import json

import httpx
import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from vroom_cache.repositories.redis_repository import PONG

SAMPLE_PROBLEM = {
    "jobs": [{"id": 1, "location": [0, 0]}],
    "vehicles": [{"id": 1, "start": [0, 0]}],
}
SAMPLE_SOLUTION = {"code": 0, "routes": [{"vehicle": 1, "steps": []}]}


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self) -> None:
        self.now = 0.0

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeCacheStore:
    """In-memory CacheStore with expiration and failure switches.

    Set ``stall`` to a number of seconds to make every call hang that long
    before answering, like a Redis server that accepted the connection but
    stopped replying.
    """

    def __init__(self, clock: FakeClock | None = None) -> None:
        self.clock = clock or FakeClock()
        self.entries: dict[str, tuple[bytes, float]] = {}
        self.reads_fail = False
        self.writes_fail = False
        self.stall = 0.0
        self.ping_reply = PONG
        self.get_calls: list[str] = []
        self.set_calls: list[tuple[str, bytes, int]] = []

    @property
    def target(self) -> str:
        return "redis://fake:6379"

    async def get(self, key: str) -> bytes | None:
        self.get_calls.append(key)
        await self._maybe_stall()
        if self.reads_fail:
            raise RedisConnectionError("Connection refused")
        entry = self.entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self.clock.now >= expires_at:
            del self.entries[key]
            return None
        return value

    async def set(self, key: str, value: bytes, ttl: int) -> None:
        self.set_calls.append((key, value, ttl))
        await self._maybe_stall()
        if self.writes_fail:
            raise RedisConnectionError("Connection refused")
        self.entries[key] = (value, self.clock.now + ttl)

    async def ping(self) -> str:
        if self.reads_fail:
            raise RedisConnectionError("Connection refused")
        return self.ping_reply

    async def _maybe_stall(self) -> None:
        if self.stall:
            await asyncio.sleep(self.stall)


class FakeUpstream:
    """Scripted VROOM endpoint for httpx.MockTransport.

    Answers with ``status``/``payload`` and counts calls; set ``error``
    to an exception type to simulate transport failures, or ``delay`` to
    a number of seconds to answer late.
    """

    def __init__(self, status: int = 200, payload: object = None) -> None:
        self.status = status
        self.payload = SAMPLE_SOLUTION if payload is None else payload
        self.error: type[httpx.TransportError] | None = None
        self.delay = 0.0
        self.requests: list[httpx.Request] = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error("upstream unavailable", request=request)
        return httpx.Response(
            self.status,
            content=json.dumps(self.payload).encode(),
            headers={"content-type": "application/json"},
        )

    @property
    def calls(self) -> int:
        return len(self.requests)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return FakeCacheStore(clock)


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def http_client(upstream):
    """AsyncClient whose requests all go to the fake upstream."""
    return httpx.AsyncClient(transport=httpx.MockTransport(upstream))


@pytest.fixture
def sample_problem():
    return json.loads(json.dumps(SAMPLE_PROBLEM))


@pytest.fixture
def sample_solution():
    return json.loads(json.dumps(SAMPLE_SOLUTION))
