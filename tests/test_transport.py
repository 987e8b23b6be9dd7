"""Tests for the HTTP transport."""

import httpx
import pytest

from chat_sync.exceptions import (
    NotAuthenticatedError,
    RemoteFailureError,
    ResponseValidationError,
)
from chat_sync.models import FindScopesResponse
from chat_sync.transport import Transport, parse_response

BASE_URL = "https://api.test/v1"


def _make_transport(handler) -> Transport:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return Transport(base_url=BASE_URL, client=client)


class TestHeaders:
    """Tests for request header construction."""

    def test_bearer_and_content_type(self):
        transport = Transport(base_url=BASE_URL)
        headers = transport.build_headers("k1")
        assert headers["Authorization"] == "Bearer k1"
        assert headers["Content-Type"] == "application/json"
        assert "x-scope" not in headers

    def test_scope_header(self):
        transport = Transport(base_url=BASE_URL, scope_header="x-team")
        assert transport.build_headers("k1", "team-1")["x-team"] == "team-1"

    def test_defaults_from_settings(self, monkeypatch):
        from chat_sync.config import get_settings

        monkeypatch.setenv("CHAT_SYNC_API_BASE_URL", "https://example.invalid/api/")
        monkeypatch.setenv("CHAT_SYNC_SCOPE_HEADER", "x-tenant")
        get_settings.cache_clear()

        transport = Transport()
        assert transport.build_headers("k", "s")["x-tenant"] == "s"
        assert transport._base_url == "https://example.invalid/api"


class TestRequest:
    """Tests for Transport.request()."""

    @pytest.mark.asyncio
    async def test_success_returns_json(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["authorization"]
            seen["scope"] = request.headers.get("x-scope")
            return httpx.Response(200, json={"object": "list", "data": []})

        transport = _make_transport(handler)
        result = await transport.request("GET", "/chats", "k1", scope="s1")

        assert result == {"object": "list", "data": []}
        assert seen == {
            "url": f"{BASE_URL}/chats",
            "auth": "Bearer k1",
            "scope": "s1",
        }

    @pytest.mark.asyncio
    async def test_sends_json_body(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["body"] = request.content
            return httpx.Response(200, json={"id": "c1"})

        transport = _make_transport(handler)
        await transport.request("PATCH", "/chats/c1", "k1", json={"privacy": "public"})

        assert seen["method"] == "PATCH"
        assert b'"privacy"' in seen["body"]

    @pytest.mark.asyncio
    async def test_no_api_key_sends_nothing(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json={})

        transport = _make_transport(handler)
        with pytest.raises(NotAuthenticatedError):
            await transport.request("GET", "/chats", None)
        assert calls == []

    @pytest.mark.asyncio
    async def test_error_message_from_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(403, json={"error": {"message": "Forbidden scope"}})

        transport = _make_transport(handler)
        with pytest.raises(RemoteFailureError) as exc_info:
            await transport.request("GET", "/chats", "k1")

        assert exc_info.value.status == 403
        assert exc_info.value.message == "Forbidden scope"
        assert "HTTP 403" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_error_without_body_uses_reason(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, text="")

        transport = _make_transport(handler)
        with pytest.raises(RemoteFailureError) as exc_info:
            await transport.request("DELETE", "/chats/c1", "k1")

        assert exc_info.value.status == 500
        assert exc_info.value.message == "Internal Server Error"

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("too slow", request=request)

        transport = _make_transport(handler)
        with pytest.raises(RemoteFailureError) as exc_info:
            await transport.request("GET", "/chats", "k1")

        assert exc_info.value.status is None
        assert "Timeout" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        transport = _make_transport(handler)
        with pytest.raises(RemoteFailureError) as exc_info:
            await transport.request("GET", "/chats", "k1")

        assert exc_info.value.status is None
        assert "Connection error" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_empty_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(204)

        transport = _make_transport(handler)
        assert await transport.request("DELETE", "/chats/c1", "k1") is None

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>oops</html>")

        transport = _make_transport(handler)
        with pytest.raises(ResponseValidationError):
            await transport.request("GET", "/chats", "k1")


class TestParseResponse:
    """Tests for response schema validation."""

    def test_valid(self):
        parsed = parse_response(
            FindScopesResponse, {"object": "list", "data": [{"id": "s1", "object": "scope"}]}
        )
        assert parsed.data[0].id == "s1"

    def test_invalid_is_remote_failure(self):
        with pytest.raises(RemoteFailureError) as exc_info:
            parse_response(FindScopesResponse, {"data": [{"name": "no id"}]})
        assert isinstance(exc_info.value, ResponseValidationError)
        assert exc_info.value.status == 200


class TestClose:
    """Tests for Transport.aclose()."""

    @pytest.mark.asyncio
    async def test_closes_shared_client(self):
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        transport = Transport(base_url=BASE_URL, client=client)

        await transport.aclose()
        assert client.is_closed is True

    @pytest.mark.asyncio
    async def test_close_without_client(self):
        await Transport(base_url=BASE_URL).aclose()
