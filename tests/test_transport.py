"""HTTP transport and REST endpoint tests against a local aiohttp server."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any

import aiohttp
import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp import test_utils

from wanderlog._api.records import RecordsApi
from wanderlog._transport import HttpTransport
from wanderlog.client import TripLog
from wanderlog.config import WanderConfig
from wanderlog.exceptions import WanderTransportError
from wanderlog.models.record import Position, RecordDraft, RecordKind
from wanderlog.persistence import MemoryPersistence
from wanderlog.session import AuthState


class _Backend:
    """Minimal trip API; records requests for assertions."""

    def __init__(self) -> None:
        self.cities: list[dict[str, Any]] = [
            {"_id": "65a1", "cityName": "Lisbon", "country": "Portugal", "date": "2024-05-01T00:00:00Z",
             "position": {"lat": 38.72, "lng": -9.14}},
            {"cityName": "no id"},
        ]
        self.requests: list[tuple[str, str, str | None]] = []
        self.fail_status: int | None = None
        self.fail_body: bytes = b"boom"

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/api/cities", self.list_cities)
        app.router.add_post("/api/cities", self.create_city)
        app.router.add_get("/api/cities/{id}", self.get_city)
        app.router.add_delete("/api/cities/{id}", self.delete_city)
        app.router.add_get("/api/plans", self.list_plans)
        return app

    def _log(self, request: web.Request) -> None:
        self.requests.append((request.method, request.path, request.headers.get("Authorization")))

    async def list_cities(self, request: web.Request) -> web.StreamResponse:
        self._log(request)
        if self.fail_status is not None:
            return web.Response(status=self.fail_status, body=self.fail_body)
        return web.json_response(self.cities)

    async def list_plans(self, request: web.Request) -> web.StreamResponse:
        self._log(request)
        return web.Response(text="not json")

    async def get_city(self, request: web.Request) -> web.StreamResponse:
        self._log(request)
        for city in self.cities:
            if city.get("_id") == request.match_info["id"]:
                return web.json_response(city)
        return web.json_response({"message": "not found"}, status=404)

    async def create_city(self, request: web.Request) -> web.StreamResponse:
        self._log(request)
        body = await request.json()
        created = {**body, "_id": "65a2"}
        self.cities.append(created)
        return web.json_response(created, status=201)

    async def delete_city(self, request: web.Request) -> web.StreamResponse:
        self._log(request)
        return web.Response(status=204)


@pytest.fixture
def backend() -> _Backend:
    return _Backend()


@pytest_asyncio.fixture
async def api_url(backend: _Backend) -> AsyncIterator[str]:
    async with test_utils.TestServer(backend.app()) as server:
        yield str(server.make_url("/api"))


@pytest_asyncio.fixture
async def http_session() -> AsyncIterator[aiohttp.ClientSession]:
    async with aiohttp.ClientSession() as session:
        yield session


@pytest.mark.asyncio
async def test_list_sends_bearer_and_normalizes_ids(
    backend: _Backend, api_url: str, http_session: aiohttp.ClientSession
) -> None:
    api = RecordsApi(HttpTransport(WanderConfig(api_base_url=api_url), http_session), RecordKind.VISITED)

    records = await api.list_records("tok-1")

    assert [record.id for record in records] == ["65a1"]
    assert records[0].coordinates == (38.72, -9.14)
    assert backend.requests == [("GET", "/api/cities", "Bearer tok-1")]


@pytest.mark.asyncio
async def test_create_get_and_delete(backend: _Backend, api_url: str, http_session: aiohttp.ClientSession) -> None:
    api = RecordsApi(HttpTransport(WanderConfig(api_base_url=api_url), http_session), RecordKind.VISITED)
    draft = RecordDraft(city_name="Porto", country_code="pt", position=Position(lat=41.15, lng=-8.61))

    created = await api.create_record("tok-1", draft)
    fetched = await api.get_record("tok-1", "65a1")
    assert await api.delete_record("tok-1", created.id) is None

    assert created.id == "65a2"
    assert created.emoji == "🇵🇹"
    assert backend.cities[-1]["cityName"] == "Porto"
    assert "countryCode" not in backend.cities[-1]
    assert fetched.city_name == "Lisbon"
    assert [(method, path) for method, path, _ in backend.requests] == [
        ("POST", "/api/cities"),
        ("GET", "/api/cities/65a1"),
        ("DELETE", "/api/cities/65a2"),
    ]


@pytest.mark.asyncio
async def test_http_error_carries_status(backend: _Backend, api_url: str, http_session: aiohttp.ClientSession) -> None:
    backend.fail_status = 500
    transport = HttpTransport(WanderConfig(api_base_url=api_url), http_session)

    with pytest.raises(WanderTransportError) as exc_info:
        await transport.request("GET", "/cities", token="tok-1")

    assert exc_info.value.status_code == 500
    assert exc_info.value.endpoint == "/cities"


@pytest.mark.asyncio
async def test_missing_record_is_404(api_url: str, http_session: aiohttp.ClientSession) -> None:
    api = RecordsApi(HttpTransport(WanderConfig(api_base_url=api_url), http_session), RecordKind.VISITED)
    with pytest.raises(WanderTransportError) as exc_info:
        await api.get_record("tok-1", "nope")
    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_empty_body_is_none(api_url: str, http_session: aiohttp.ClientSession) -> None:
    transport = HttpTransport(WanderConfig(api_base_url=api_url), http_session)
    assert await transport.request("DELETE", "/cities/65a1") is None


@pytest.mark.asyncio
async def test_invalid_json_raises(api_url: str, http_session: aiohttp.ClientSession) -> None:
    transport = HttpTransport(WanderConfig(api_base_url=api_url), http_session)
    with pytest.raises(WanderTransportError, match="Invalid JSON"):
        await transport.request("GET", "/plans")


@pytest.mark.asyncio
async def test_connection_failure_raises(http_session: aiohttp.ClientSession) -> None:
    transport = HttpTransport(WanderConfig(api_base_url="http://127.0.0.1:1/api", request_timeout=2), http_session)
    with pytest.raises(WanderTransportError) as exc_info:
        await transport.request("GET", "/cities")
    assert exc_info.value.status_code is None


@pytest.mark.asyncio
async def test_server_error_empties_store_with_message(backend: _Backend, api_url: str) -> None:
    backend.fail_status = 500
    config = WanderConfig(api_base_url=api_url)

    async with TripLog(config, persistence=MemoryPersistence()) as log:
        await log.set_auth(AuthState(user_id="u-1", token="tok-1"))

        assert log.visited.state.records == ()
        assert log.visited.state.error == "There was an error loading cities..."
        assert log.visited.state.is_loading is False
        assert log.planned.state.error == "There was an error loading plans..."


@pytest.mark.asyncio
async def test_undecodable_error_body_still_raises_transport_error(
    backend: _Backend, api_url: str, http_session: aiohttp.ClientSession
) -> None:
    backend.fail_status = 500
    backend.fail_body = b"\xff\xfe\xfa boom"
    transport = HttpTransport(WanderConfig(api_base_url=api_url), http_session)

    with pytest.raises(WanderTransportError) as exc_info:
        await transport.request("GET", "/cities", token="tok-1")

    assert exc_info.value.status_code == 500


@pytest.mark.asyncio
async def test_undecodable_error_body_settles_store(backend: _Backend, api_url: str) -> None:
    backend.fail_status = 500
    backend.fail_body = b"\xff\xfe"

    async with TripLog(WanderConfig(api_base_url=api_url), persistence=MemoryPersistence()) as log:
        await log.set_auth(AuthState(user_id="u-1", token="tok-1"))

        assert log.visited.state.records == ()
        assert log.visited.state.is_loading is False
        assert log.visited.state.error == "There was an error loading cities..."
