"""Unit tests for PostgrestBackendClient using httpx.MockTransport."""

from __future__ import annotations

from typing import Callable

import httpx
import pytest

from src.providers.backend.postgrest_client import PostgrestBackendClient, build_filter_params
from src.utils.errors import ApplicationError, TransportError, is_transport_failure

Handler = Callable[[httpx.Request], httpx.Response]


def _client(handler: Handler, api_key: str = "anon-key") -> PostgrestBackendClient:
    http_client = httpx.AsyncClient(
        base_url="http://backend.test", transport=httpx.MockTransport(handler)
    )
    return PostgrestBackendClient(http_client, api_key=api_key)


class TestFilterParams:
    def test_equality_and_null(self) -> None:
        assert build_filter_params({"active": True, "slug": "gout", "deleted_at": None}) == [
            ("active", "eq.true"),
            ("slug", "eq.gout"),
            ("deleted_at", "is.null"),
        ]

    def test_empty(self) -> None:
        assert build_filter_params(None) == []


class TestSelect:
    @pytest.mark.asyncio
    async def test_builds_query_and_headers(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[{"id": "1"}])

        rows = await _client(handler).select(
            "diseases",
            filters={"active": True},
            order=[("order_index", True), ("name", False)],
            limit=5,
        )

        assert rows == [{"id": "1"}]
        request = seen[0]
        assert request.url.path == "/rest/v1/diseases"
        assert request.url.params["active"] == "eq.true"
        assert request.url.params["order"] == "order_index.asc,name.desc"
        assert request.url.params["limit"] == "5"
        assert request.headers["apikey"] == "anon-key"
        assert request.headers["authorization"] == "Bearer anon-key"

    @pytest.mark.asyncio
    async def test_select_one_returns_none_when_empty(self) -> None:
        client = _client(lambda request: httpx.Response(200, json=[]))
        assert await client.select_one("questions", filters={"slug": "nope"}) is None

    @pytest.mark.asyncio
    async def test_no_auth_headers_without_key(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[])

        await _client(handler, api_key="").select("questions")
        assert "apikey" not in seen[0].headers


class TestErrorClassification:
    @pytest.mark.asyncio
    async def test_connect_error_becomes_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(TransportError) as excinfo:
            await _client(handler).select("diseases")

        assert excinfo.value.provider_name == "postgrest"
        assert isinstance(excinfo.value.__cause__, httpx.ConnectError)
        assert is_transport_failure(excinfo.value)

    @pytest.mark.asyncio
    async def test_error_response_becomes_application_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                401, json={"code": "PGRST301", "message": "JWT expired"}
            )

        with pytest.raises(ApplicationError) as excinfo:
            await _client(handler).select("profiles")

        assert excinfo.value.status_code == 401
        assert excinfo.value.code == "PGRST301"
        assert "JWT expired" in excinfo.value.message
        assert is_transport_failure(excinfo.value) is False

    @pytest.mark.asyncio
    async def test_non_json_error_body(self) -> None:
        client = _client(lambda request: httpx.Response(502, text="Bad Gateway"))
        with pytest.raises(ApplicationError) as excinfo:
            await client.select("diseases")
        assert excinfo.value.code is None


class TestWrites:
    @pytest.mark.asyncio
    async def test_insert_returns_representation(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(201, json=[{"id": "9", "title": "Savol"}])

        created = await _client(handler).insert("questions", {"title": "Savol"})

        assert created == {"id": "9", "title": "Savol"}
        assert seen[0].method == "POST"
        assert seen[0].headers["prefer"] == "return=representation"

    @pytest.mark.asyncio
    async def test_update_and_delete_send_filters(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            if request.method == "PATCH":
                return httpx.Response(200, json=[{"id": "3", "featured": True}])
            return httpx.Response(204)

        client = _client(handler)
        rows = await client.update("diseases", {"featured": True}, {"id": "3"})
        await client.delete("diseases", {"id": "3"})

        assert rows == [{"id": "3", "featured": True}]
        assert [r.method for r in seen] == ["PATCH", "DELETE"]
        assert all(r.url.params["id"] == "eq.3" for r in seen)


class TestPing:
    @pytest.mark.asyncio
    async def test_reachable(self) -> None:
        client = _client(lambda request: httpx.Response(200, json=[]))
        assert await client.ping() is True

    @pytest.mark.asyncio
    async def test_unreachable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        assert await _client(handler).ping() is False
