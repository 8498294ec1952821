"""Unit tests for the typed fetch helper.

Tests cover:
- Classification order of network, parse, shape, API and HTTP failures
- Success payload validation
- Query string encoding
- Conversion of failures to exceptions
"""

import json

import httpx
import pytest

from mux_console.api.models import AssetDeleted
from mux_console.client.fetch import (
    ApiFailure,
    ClientErr,
    ClientFetchError,
    ClientOk,
    HttpFailure,
    NetworkError,
    ValidationFailure,
    build_search_params,
    client_result_to_error,
    safe_fetch,
)


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://console")


class TestSafeFetch:
    @pytest.mark.asyncio
    async def test_success(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.headers["accept"] == "application/json"
            return httpx.Response(200, json={"ok": True, "data": {"asset_id": "a1"}})

        async with _client(handler) as http:
            result = await safe_fetch(http, "/api/assets/a1", response_type=AssetDeleted)

        assert result == ClientOk(AssetDeleted(asset_id="a1"))
        assert result.ok is True

    @pytest.mark.asyncio
    async def test_error_envelope_with_4xx_is_api_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                404,
                json={"ok": False, "error": {"code": "ASSET_NOT_FOUND", "message": "Asset not found"}},
            )

        async with _client(handler) as http:
            result = await safe_fetch(http, "/api/assets/a1", response_type=AssetDeleted)

        assert result == ClientErr(ApiFailure("ASSET_NOT_FOUND", "Asset not found"))
        assert result.error.type == "API_ERROR"

    @pytest.mark.asyncio
    async def test_error_envelope_with_200_is_still_api_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"ok": False, "error": {"code": "X", "message": "y"}})

        async with _client(handler) as http:
            result = await safe_fetch(http, "/", response_type=AssetDeleted)

        assert isinstance(result.error, ApiFailure)

    @pytest.mark.asyncio
    async def test_success_envelope_with_error_status_is_http_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, json={"ok": True, "data": {"asset_id": "a1"}})

        async with _client(handler) as http:
            result = await safe_fetch(http, "/", response_type=AssetDeleted)

        assert result == ClientErr(HttpFailure(500, "HTTP 500: Request failed"))

    @pytest.mark.asyncio
    async def test_invalid_json_is_http_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="<html>Bad gateway</html>")

        async with _client(handler) as http:
            result = await safe_fetch(http, "/", response_type=AssetDeleted)

        assert result == ClientErr(HttpFailure(502, "HTTP 502: Invalid JSON response"))

    @pytest.mark.asyncio
    async def test_wrong_shape_is_validation_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"ok": True, "data": {"unexpected": 1}})

        async with _client(handler) as http:
            result = await safe_fetch(http, "/", response_type=AssetDeleted)

        assert isinstance(result.error, ValidationFailure)
        assert result.error.message.startswith("Invalid response format")

    @pytest.mark.asyncio
    async def test_success_body_without_ok_flag_is_validation_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"data": 5})

        async with _client(handler) as http:
            result = await safe_fetch(http, "/", response_type=int)

        assert isinstance(result.error, ValidationFailure)
        assert result.error.type == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_error_body_without_ok_flag_is_validation_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, json={"error": {"code": "X", "message": "m"}})

        async with _client(handler) as http:
            result = await safe_fetch(http, "/", response_type=AssetDeleted)

        assert isinstance(result.error, ValidationFailure)
        assert result.error.type == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_non_boolean_ok_flag_is_validation_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"ok": "yes", "data": {"asset_id": "a1"}})

        async with _client(handler) as http:
            result = await safe_fetch(http, "/", response_type=AssetDeleted)

        assert isinstance(result.error, ValidationFailure)

    @pytest.mark.asyncio
    async def test_network_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler) as http:
            result = await safe_fetch(http, "/", response_type=AssetDeleted)

        assert result == ClientErr(NetworkError("connection refused"))
        assert result.ok is False

    @pytest.mark.asyncio
    async def test_sends_method_body_and_headers(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["body"] = json.loads(request.content)
            seen["trace"] = request.headers.get("x-trace")
            return httpx.Response(200, json={"ok": True, "data": {"asset_id": "a1"}})

        async with _client(handler) as http:
            await safe_fetch(
                http,
                "/api/assets",
                method="POST",
                json={"urls": []},
                headers={"X-Trace": "t1"},
                response_type=AssetDeleted,
            )

        assert seen == {"method": "POST", "body": {"urls": []}, "trace": "t1"}


class TestBuildSearchParams:
    def test_skips_none_and_encodes_booleans(self):
        assert build_search_params({"page": 2, "search": None, "used": False}) == (
            "page=2&used=false"
        )

    def test_escapes_values(self):
        assert build_search_params({"search": "a b&c"}) == "search=a+b%26c"

    def test_empty(self):
        assert build_search_params({}) == ""


class TestClientResultToError:
    @pytest.mark.parametrize(
        ("error", "message"),
        [
            (ApiFailure("ASSET_NOT_FOUND", "gone"), "ASSET_NOT_FOUND: gone"),
            (HttpFailure(500, "oops"), "HTTP 500: oops"),
            (ValidationFailure("bad"), "Validation Error: bad"),
            (NetworkError("down"), "Network Error: down"),
        ],
    )
    def test_messages(self, error, message):
        exc = client_result_to_error(ClientErr(error))

        assert isinstance(exc, ClientFetchError)
        assert str(exc) == message
        assert exc.error is error

    def test_success_is_rejected(self):
        with pytest.raises(ValueError):
            client_result_to_error(ClientOk(1))
