"""Tests for the upstream forwarder."""

import asyncio
import errno
import json
import socket
import time

import httpx
import pytest

from vroom_cache.entities import ForwardSuccess, TransportFailure, UnexpectedFailure, UpstreamError
from vroom_cache.services import VroomForwarder
from vroom_cache.services.forwarder import transport_failure_code

VROOM_URL = "http://vroom.test:3000"


@pytest.fixture
def forwarder(http_client):
    return VroomForwarder(http_client, url=VROOM_URL, timeout=60)


@pytest.mark.asyncio
async def test_success_relays_body_verbatim(forwarder, upstream, sample_problem, sample_solution):
    outcome = await forwarder.forward(sample_problem)

    assert isinstance(outcome, ForwardSuccess)
    assert outcome.status_code == 200
    assert json.loads(outcome.body) == sample_solution
    assert outcome.content_type == "application/json"


@pytest.mark.asyncio
async def test_request_is_compact_json_post(forwarder, upstream, sample_problem):
    await forwarder.forward(sample_problem)

    request = upstream.requests[0]
    assert request.method == "POST"
    assert str(request.url) == VROOM_URL
    assert request.headers["content-type"] == "application/json"
    assert request.content == json.dumps(sample_problem, separators=(",", ":")).encode()


@pytest.mark.asyncio
async def test_request_carries_upstream_timeout(forwarder, upstream, sample_problem):
    await forwarder.forward(sample_problem)

    assert upstream.requests[0].extensions["timeout"]["read"] == 60


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [201, 400, 404, 500, 503])
async def test_non_200_is_upstream_error(forwarder, upstream, sample_problem, status):
    upstream.status = status
    upstream.payload = {"code": 2, "error": "Invalid input"}

    outcome = await forwarder.forward(sample_problem)

    assert isinstance(outcome, UpstreamError)
    assert outcome.status_code == status
    assert json.loads(outcome.body) == {"code": 2, "error": "Invalid input"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("error", "code"),
    [
        (httpx.ConnectError, "ECONNREFUSED"),
        (httpx.ConnectTimeout, "ETIMEDOUT"),
        (httpx.ReadTimeout, "ETIMEDOUT"),
        (httpx.ReadError, "ECONNRESET"),
        (httpx.RemoteProtocolError, "ECONNRESET"),
    ],
)
async def test_transport_errors_become_transport_failure(forwarder, upstream, sample_problem, error, code):
    upstream.error = error

    outcome = await forwarder.forward(sample_problem)

    assert isinstance(outcome, TransportFailure)
    assert outcome.code == code


@pytest.mark.asyncio
async def test_late_answer_times_out(http_client, upstream, sample_problem):
    upstream.delay = 5
    forwarder = VroomForwarder(http_client, url=VROOM_URL, timeout=0.1)

    started = time.monotonic()
    outcome = await forwarder.forward(sample_problem)

    assert isinstance(outcome, TransportFailure)
    assert outcome.code == "ETIMEDOUT"
    assert time.monotonic() - started < 2


@pytest.mark.asyncio
async def test_dripping_body_is_bounded_as_a_whole(sample_problem):
    async def drip():
        # every chunk lands well within the timeout, the whole body does not
        for _ in range(20):
            await asyncio.sleep(0.05)
            yield b" "
        yield b"{}"

    async def respond(request):
        return httpx.Response(200, content=drip(), headers={"content-type": "application/json"})

    client = httpx.AsyncClient(transport=httpx.MockTransport(respond))
    forwarder = VroomForwarder(client, url=VROOM_URL, timeout=0.3)

    started = time.monotonic()
    outcome = await forwarder.forward(sample_problem)

    assert isinstance(outcome, TransportFailure)
    assert outcome.code == "ETIMEDOUT"
    assert time.monotonic() - started < 0.9
    await client.aclose()


@pytest.mark.asyncio
async def test_unserializable_body_is_unexpected_failure(forwarder, upstream):
    outcome = await forwarder.forward({"bad": {1, 2}})

    assert isinstance(outcome, UnexpectedFailure)
    assert upstream.calls == 0


def test_failure_code_prefers_os_error():
    exc = httpx.ConnectError("refused")
    exc.__cause__ = ConnectionRefusedError(errno.ECONNREFUSED, "Connection refused")
    assert transport_failure_code(exc) == "ECONNREFUSED"


def test_failure_code_for_dns_errors():
    exc = httpx.ConnectError("no such host")
    exc.__cause__ = socket.gaierror(-2, "Name or service not known")
    assert transport_failure_code(exc) == "ENOTFOUND"


def test_failure_code_fallback():
    assert transport_failure_code(httpx.UnsupportedProtocol("ftp")) == "ETRANSPORT"
