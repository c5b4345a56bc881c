import contextlib
import uuid

import aiohttp
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from social_api.circuit_breaker import BreakerState
from social_api.config import CircuitBreakerConfig
from social_api.errors import DependencyUnavailableError, HttpClientError, NotFoundError
from social_api.profile_client import ProfileClient


class Recorder:
    """Stub validate endpoint that counts calls and can demand a header."""

    def __init__(self, status=200, body=None, expected_auth=None):
        self.status = status
        self.body = body
        self.expected_auth = expected_auth
        self.calls = 0

    async def handle(self, request):
        self.calls += 1
        wrong_auth = (
            self.expected_auth is not None
            and request.headers.get("Authorization") != self.expected_auth
        )
        if wrong_auth:
            return web.Response(status=404)
        if self.body is None:
            return web.Response(status=self.status)
        return web.json_response(self.body, status=self.status)


@contextlib.asynccontextmanager
async def profile_api(recorder, **client_kwargs):
    """Serve the recorder and yield a ProfileClient pointed at it."""
    app = web.Application()
    app.router.add_get("/v1/auth/validate", recorder.handle)
    server = TestServer(app)
    await server.start_server()
    try:
        async with aiohttp.ClientSession() as session:
            yield ProfileClient(session, str(server.make_url("/")), **client_kwargs)
    finally:
        await server.close()


def thresholds(failures):
    return CircuitBreakerConfig(
        failure_threshold=failures, recovery_timeout_secs=10, success_threshold=1
    )


@pytest.mark.parametrize("prefix", ["usr_", ""], ids=["prefixed", "bare"])
@pytest.mark.asyncio
async def test_validate_token_success(prefix):
    expected = uuid.uuid4()
    recorder = Recorder(
        body={"valid": True, "user_id": f"{prefix}{expected}", "display_name": "Test User"},
        expected_auth="Bearer token",
    )
    async with profile_api(recorder, config=CircuitBreakerConfig()) as client:
        user_id = await client.validate_token("token")
    assert user_id == expected


@pytest.mark.parametrize(
    "recorder, expected",
    [
        (Recorder(status=401, body={"valid": False, "error": "invalid_token"}), NotFoundError),
        (Recorder(body={"valid": False}), NotFoundError),
        (Recorder(status=500), DependencyUnavailableError),
        (Recorder(body={"valid": True, "user_id": "usr_not_a_uuid"}), NotFoundError),
    ],
    ids=["unauthorized", "valid_false", "server_error", "malformed_uuid"],
)
@pytest.mark.asyncio
async def test_validate_token_failures(recorder, expected):
    async with profile_api(recorder) as client:
        with pytest.raises(expected):
            await client.validate_token("token")


@pytest.mark.asyncio
async def test_validate_token_trips_circuit_breaker():
    recorder = Recorder(status=500)
    states = []
    listener = lambda name, state: states.append((name, state))  # noqa: E731
    async with profile_api(recorder, config=thresholds(2), on_state_change=listener) as client:
        outcomes = []
        for _ in range(3):
            with pytest.raises(DependencyUnavailableError) as excinfo:
                await client.validate_token("token")
            outcomes.append(type(excinfo.value))

    assert outcomes == [DependencyUnavailableError] * 3
    assert recorder.calls == 2
    assert states[-1] == ("Profile API", BreakerState.OPEN)


@pytest.mark.asyncio
async def test_validate_token_unauthorized_does_not_trip_circuit_breaker():
    recorder = Recorder(status=401)
    async with profile_api(recorder, config=thresholds(1)) as client:
        for _ in range(2):
            with pytest.raises(NotFoundError):
                await client.validate_token("token")

    assert recorder.calls == 2
    assert client.breaker.state is BreakerState.CLOSED


@pytest.mark.asyncio
async def test_validate_token_connection_failure_is_http_error():
    async with profile_api(Recorder()) as live_client:
        base_url = live_client.base_url
    async with aiohttp.ClientSession() as session:
        client = ProfileClient(session, base_url)
        with pytest.raises(HttpClientError):
            await client.validate_token("token")