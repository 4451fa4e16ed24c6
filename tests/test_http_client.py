"""Tests for the Hashnode GraphQL client."""

from __future__ import annotations

import json

import httpx
import pytest

from conftest import ENDPOINT, HOST, make_post, posts_response
from hashnode_loader.core.cache import ResponseCache
from hashnode_loader.core.error_recovery import (
    AuthenticationRequiredError,
    GraphQLError,
    HttpError,
    ProtocolError,
    QueryTimeoutError,
    TransportError,
)
from hashnode_loader.core.http_client import HashnodeClient, extract_connection

QUERY = "query Test($host: String!) { publication(host: $host) { id } }"


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def request_body(request: httpx.Request) -> dict:
    return json.loads(request.content)


@pytest.mark.asyncio
async def test_query_returns_data(httpx_mock):
    httpx_mock.add_response(method="POST", url=ENDPOINT, json={"data": {"publication": {"id": "p1"}}})

    client = HashnodeClient(HOST)
    data = await client.query(QUERY, {"host": HOST})

    assert data == {"publication": {"id": "p1"}}
    request = httpx_mock.get_request()
    assert request.headers["Content-Type"] == "application/json"
    assert "Authorization" not in request.headers
    assert request_body(request) == {"query": QUERY, "variables": {"host": HOST}}


@pytest.mark.asyncio
async def test_token_sent_as_authorization_header(httpx_mock):
    httpx_mock.add_response(method="POST", url=ENDPOINT, json={"data": {"me": None}})

    client = HashnodeClient(HOST, token="secret-token")
    await client.query("query { me { id } }")

    assert httpx_mock.get_request().headers["Authorization"] == "secret-token"


@pytest.mark.asyncio
async def test_cached_response_suppresses_network_call(httpx_mock):
    httpx_mock.add_response(method="POST", url=ENDPOINT, json={"data": {"publication": {"id": "p1"}}})

    client = HashnodeClient(HOST)
    first = await client.query(QUERY, {"host": HOST})
    second = await client.query(QUERY, {"host": HOST})

    assert first == second
    assert len(httpx_mock.get_requests()) == 1


def test_injected_empty_cache_is_used():
    injected = ResponseCache(default_ttl=10)

    client = HashnodeClient(HOST, response_cache=injected)

    assert len(injected) == 0
    assert client.cache is injected


@pytest.mark.asyncio
async def test_expired_entry_is_refetched(httpx_mock):
    httpx_mock.add_response(method="POST", url=ENDPOINT, json={"data": {"publication": {"id": "old"}}})
    httpx_mock.add_response(method="POST", url=ENDPOINT, json={"data": {"publication": {"id": "new"}}})

    clock = FakeClock()
    client = HashnodeClient(HOST, cache_ttl=1, response_cache=ResponseCache(default_ttl=1, clock=clock))

    assert (await client.query(QUERY, {"host": HOST}))["publication"]["id"] == "old"
    clock.now += 1.1
    assert (await client.query(QUERY, {"host": HOST}))["publication"]["id"] == "new"
    assert len(httpx_mock.get_requests()) == 2


@pytest.mark.asyncio
async def test_cache_disabled(httpx_mock):
    httpx_mock.add_response(method="POST", url=ENDPOINT, json={"data": {"a": 1}})
    httpx_mock.add_response(method="POST", url=ENDPOINT, json={"data": {"a": 1}})

    client = HashnodeClient(HOST, cache=False)
    await client.query(QUERY)
    await client.query(QUERY)

    assert client.cache is None
    assert len(httpx_mock.get_requests()) == 2


@pytest.mark.asyncio
async def test_http_error(httpx_mock):
    httpx_mock.add_response(method="POST", url=ENDPOINT, status_code=500)

    client = HashnodeClient(HOST)
    with pytest.raises(HttpError) as exc_info:
        await client.query(QUERY)

    assert exc_info.value.status_code == 500
    assert str(exc_info.value) == "HTTP 500: Internal Server Error"
    assert exc_info.value.code == "HTTP_ERROR"
    assert exc_info.value.retryable is True


@pytest.mark.asyncio
async def test_client_error_not_retryable(httpx_mock):
    httpx_mock.add_response(method="POST", url=ENDPOINT, status_code=401)

    with pytest.raises(HttpError) as exc_info:
        await HashnodeClient(HOST).query(QUERY)

    assert exc_info.value.retryable is False


@pytest.mark.asyncio
async def test_failed_response_not_cached(httpx_mock):
    httpx_mock.add_response(method="POST", url=ENDPOINT, status_code=503)
    httpx_mock.add_response(method="POST", url=ENDPOINT, json={"data": {"ok": True}})

    client = HashnodeClient(HOST)
    with pytest.raises(HttpError):
        await client.query(QUERY)
    assert await client.query(QUERY) == {"ok": True}


@pytest.mark.asyncio
async def test_graphql_errors(httpx_mock):
    httpx_mock.add_response(
        method="POST",
        url=ENDPOINT,
        json={"errors": [{"message": "Field missing"}, {"message": "Bad cursor"}], "data": None},
    )

    with pytest.raises(GraphQLError) as exc_info:
        await HashnodeClient(HOST).query(QUERY)

    assert str(exc_info.value) == "GraphQL errors: Field missing, Bad cursor"
    assert exc_info.value.messages == ["Field missing", "Bad cursor"]


@pytest.mark.asyncio
async def test_missing_data(httpx_mock):
    httpx_mock.add_response(method="POST", url=ENDPOINT, json={})

    with pytest.raises(ProtocolError, match="No data returned from GraphQL query"):
        await HashnodeClient(HOST).query(QUERY)


@pytest.mark.asyncio
async def test_invalid_json(httpx_mock):
    httpx_mock.add_response(method="POST", url=ENDPOINT, text="<html>gateway</html>")

    with pytest.raises(ProtocolError):
        await HashnodeClient(HOST).query(QUERY)


@pytest.mark.asyncio
async def test_timeout(httpx_mock):
    httpx_mock.add_exception(httpx.ReadTimeout("read timed out"))

    with pytest.raises(QueryTimeoutError) as exc_info:
        await HashnodeClient(HOST, timeout_ms=1500).query(QUERY)

    assert str(exc_info.value) == "Request timeout after 1500ms"
    assert exc_info.value.code == "TIMEOUT"


@pytest.mark.asyncio
async def test_network_error(httpx_mock):
    httpx_mock.add_exception(httpx.ConnectError("connection refused"))

    with pytest.raises(TransportError) as exc_info:
        await HashnodeClient(HOST).query(QUERY)

    assert exc_info.value.code == "NETWORK_ERROR"
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


@pytest.mark.asyncio
async def test_drafts_require_token():
    client = HashnodeClient(HOST)
    with pytest.raises(AuthenticationRequiredError):
        await client.get_drafts()
    with pytest.raises(AuthenticationRequiredError):
        await client.get_draft("abc")


@pytest.mark.asyncio
async def test_get_posts_variables(httpx_mock):
    httpx_mock.add_response(method="POST", url=ENDPOINT, json={"data": posts_response([make_post(1)])})

    client = HashnodeClient(HOST)
    result = await client.get_posts(first=20, after="cursor-1", include_comments=True)

    body = request_body(httpx_mock.get_request())
    assert body["variables"] == {"host": HOST, "first": 20, "after": "cursor-1"}
    assert "comments(first: 25)" in body["query"]
    assert extract_connection(result, "publication", "posts")["edges"][0]["node"]["id"] == "id-1"


@pytest.mark.asyncio
async def test_search_posts_filter(httpx_mock):
    httpx_mock.add_response(
        method="POST", url=ENDPOINT, json={"data": {"searchPostsOfPublication": {"edges": []}}}
    )

    await HashnodeClient(HOST).search_posts("asyncio", first=20)

    variables = request_body(httpx_mock.get_request())["variables"]
    assert variables["filter"] == {"query": "asyncio", "publicationId": HOST}
    assert variables["first"] == 20


@pytest.mark.asyncio
async def test_get_post_returns_none_when_missing(httpx_mock):
    httpx_mock.add_response(method="POST", url=ENDPOINT, json={"data": {"publication": {"post": None}}})

    assert await HashnodeClient(HOST).get_post("nope") is None


@pytest.mark.asyncio
async def test_context_manager_reuses_connection(httpx_mock):
    httpx_mock.add_response(method="POST", url=ENDPOINT, json={"data": {"publication": {"id": "p1"}}})

    async with HashnodeClient(HOST) as client:
        assert client._client is not None
        publication = await client.get_publication()

    assert publication == {"id": "p1"}
    assert client._client is None


@pytest.mark.asyncio
async def test_clear_cache(httpx_mock):
    httpx_mock.add_response(method="POST", url=ENDPOINT, json={"data": {"a": 1}})
    httpx_mock.add_response(method="POST", url=ENDPOINT, json={"data": {"a": 2}})

    client = HashnodeClient(HOST)
    await client.query(QUERY)
    assert client.clear_cache() == 1
    assert await client.query(QUERY) == {"a": 2}


def test_empty_host_rejected():
    with pytest.raises(ValueError, match="publication_host cannot be empty"):
        HashnodeClient("")


def test_extract_connection_handles_gaps():
    assert extract_connection({"publication": None}, "publication", "posts") is None
    assert extract_connection(None, "publication") is None
