import uuid
from contextlib import asynccontextmanager

import aiohttp
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from social_api.circuit_breaker import BreakerState
from social_api.config import CircuitBreakerConfig
from social_api.content_client import HttpContentClient
from social_api.domain import ContentType
from social_api.errors import DependencyUnavailableError, HttpClientError, NotFoundError
from social_api.registry import ContentTypeRegistry


@asynccontextmanager
async def content_client(respond, content_types=("post",), config=None):
    """Run a stub Content API answering with respond(); yield (client, hit paths)."""
    hits = []

    async def handler(request):
        hits.append(request.path)
        return respond()

    app = web.Application()
    app.router.add_route("GET", "/{tail:.*}", handler)
    server = TestServer(app)
    await server.start_server()
    base_url = str(server.make_url(""))
    registry = ContentTypeRegistry.from_base_urls([(ct, base_url) for ct in content_types])
    try:
        async with aiohttp.ClientSession() as session:
            yield HttpContentClient(session, registry, config), hits
    finally:
        await server.close()


def breaker_config(failure_threshold):
    return CircuitBreakerConfig(
        failure_threshold=failure_threshold, recovery_timeout_secs=10, success_threshold=1
    )


@pytest.mark.asyncio
async def test_validate_content_success():
    content_id = uuid.uuid4()
    item = {"id": str(content_id), "content_type": "post", "title": "Mock post content"}
    async with content_client(lambda: web.json_response({"items": [item]})) as (client, hits):
        result = await client.validate_content(ContentType("post"), content_id)
    assert result is None
    assert hits == [f"/v1/post/{content_id}"]


@pytest.mark.parametrize(
    "respond, expected",
    [
        (lambda: web.json_response({"items": []}), NotFoundError),
        (lambda: web.json_response({}), NotFoundError),
        (lambda: web.Response(status=404), NotFoundError),
        (lambda: web.Response(status=500), DependencyUnavailableError),
        (lambda: web.Response(status=200, text="not json"), HttpClientError),
    ],
    ids=["empty_items", "missing_items", "status_404", "status_500", "invalid_json"],
)
@pytest.mark.asyncio
async def test_validate_content_failures(respond, expected):
    async with content_client(respond) as (client, _):
        with pytest.raises(expected):
            await client.validate_content(ContentType("post"), uuid.uuid4())


@pytest.mark.asyncio
async def test_validate_content_wrong_content_type_returns_not_found():
    content_id = uuid.uuid4()
    respond = lambda: web.Response(status=404)  # noqa: E731
    async with content_client(respond, content_types=("invalid_type",)) as (client, hits):
        with pytest.raises(NotFoundError):
            await client.validate_content(ContentType("invalid_type"), content_id)
    assert hits == [f"/v1/invalid_type/{content_id}"]


@pytest.mark.parametrize(
    "status, threshold, expected, hit_count, final_state",
    [
        (500, 2, DependencyUnavailableError, 2, BreakerState.OPEN),
        (404, 1, NotFoundError, 3, BreakerState.CLOSED),
    ],
    ids=["server_errors_trip", "not_found_does_not_trip"],
)
@pytest.mark.asyncio
async def test_breaker_reacts_to_status(status, threshold, expected, hit_count, final_state):
    content_id = uuid.uuid4()
    respond = lambda: web.Response(status=status)  # noqa: E731
    async with content_client(respond, config=breaker_config(threshold)) as (client, hits):
        for _ in range(3):
            with pytest.raises(expected) as excinfo:
                await client.validate_content(ContentType("post"), content_id)
    assert len(hits) == hit_count
    assert client.breaker.state is final_state
    assert str(excinfo.value)


@pytest.mark.asyncio
async def test_open_breaker_names_the_service():
    respond = lambda: web.Response(status=500)  # noqa: E731
    async with content_client(respond, config=breaker_config(1)) as (client, hits):
        with pytest.raises(DependencyUnavailableError):
            await client.validate_content(ContentType("post"), uuid.uuid4())
        with pytest.raises(DependencyUnavailableError) as excinfo:
            await client.validate_content(ContentType("post"), uuid.uuid4())
    assert excinfo.value.service == "Content API"
    assert len(hits) == 1


@pytest.mark.asyncio
async def test_connection_failure_is_http_error():
    async with content_client(lambda: web.Response(status=200)) as (client, _):
        registry = client.registry
    async with aiohttp.ClientSession() as session:
        dead_client = HttpContentClient(session, registry, breaker_config(1))
        with pytest.raises(HttpClientError):
            await dead_client.validate_content(ContentType("post"), uuid.uuid4())
    assert dead_client.breaker.state is BreakerState.OPEN