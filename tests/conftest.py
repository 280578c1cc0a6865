"""
Shared fixtures for the weather front-end tests.

The weather provider is faked with ``httpx.MockTransport``: each test registers
the answer per ``location`` query and inspects the recorded requests.
"""

from typing import Any, Dict, List, Tuple

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from app import create_app
from services.weather_service import WeatherLookup


def make_realtime_payload(
    temperature: Any = 18.456,
    weather_code: Any = 1000,
    name: str | None = "London, Greater London, England, United Kingdom",
    address: str | None = None,
    apparent: Any = None,
) -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    if temperature is not None:
        values["temperature"] = temperature
    if apparent is not None:
        values["temperatureApparent"] = apparent
    if weather_code is not None:
        values["weatherCode"] = weather_code
    location: Dict[str, Any] = {}
    if name is not None:
        location["name"] = name
    if address is not None:
        location["address"] = address
    return {"data": {"time": "2026-10-17T12:00:00Z", "values": values}, "location": location}


class FakeProvider:
    """Routes realtime requests by their ``location`` query parameter."""

    def __init__(self) -> None:
        self.routes: Dict[str, Tuple[int, Any]] = {}
        self.default: Tuple[int, Any] = (404, {"code": 400001, "message": "location not found"})
        self.requests: List[httpx.Request] = []
        self.error: Exception | None = None

    def respond(self, location: str, status: int = 200, body: Any = None) -> None:
        self.routes[location] = (status, make_realtime_payload() if body is None else body)

    @property
    def queried_locations(self) -> List[str]:
        return [r.url.params.get("location") for r in self.requests]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        status, body = self.routes.get(request.url.params.get("location"), self.default)
        if isinstance(body, (bytes, str)):
            return httpx.Response(status, content=body)
        return httpx.Response(status, json=body)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def lookup(provider):
    return WeatherLookup("test-key-123", transport=provider.transport())


@pytest.fixture
def app(lookup, tmp_path):
    index = tmp_path / "index.html"
    index.write_text("<html><body><h1>Current weather</h1></body></html>", encoding="utf-8")
    return create_app(index_path=index, lookup=lookup)


@pytest.fixture
async def client(app):
    """Async HTTP client bound to the test app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
