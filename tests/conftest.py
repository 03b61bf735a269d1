"""Shared fixtures: settings, a fake Duffel API and a controllable clock."""

from __future__ import annotations

import asyncio
from typing import Any

import httpx
import pytest

from airport_lookup.cache import MemoryKeyValueStore
from airport_lookup.config import LookupSettings
from airport_lookup.schemas import AirportOption, OptionSource


def duffel_airport(
    iata: str,
    name: str,
    city: str,
    country: str = "GB",
    lat: float | None = None,
    lon: float | None = None,
) -> dict[str, Any]:
    """A record shaped like Duffel's ``/air/airports`` items."""
    return {
        "id": f"arp_{iata.lower()}",
        "iata_code": iata,
        "icao_code": None,
        "name": name,
        "city_name": city,
        "iata_country_code": country,
        "latitude": lat,
        "longitude": lon,
        "time_zone": "Europe/London",
        "type": "airport",
    }


def option(
    iata: str,
    city: str = "Somewhere",
    name: str | None = None,
    country: str = "Nowhere",
    source: OptionSource = OptionSource.LOCAL,
) -> AirportOption:
    return AirportOption(
        iata=iata,
        name=name or f"{city} Airport",
        city=city,
        country=country,
        source=source,
    )


class FakeDuffel:
    """Callable handler for :class:`httpx.MockTransport`.

    Serves ``pages`` for catalog requests (cursor = next page index) and
    ``by_iata`` / ``by_city`` for filtered requests. ``latency`` delays each
    response so concurrent callers overlap.
    """

    def __init__(
        self,
        pages: list[list[dict[str, Any]]] | None = None,
        *,
        by_iata: dict[str, list[dict[str, Any]]] | None = None,
        by_city: dict[str, list[dict[str, Any]]] | None = None,
        fail_on_page: int | None = None,
        fail_all: bool = False,
        fail_next: list[int] | None = None,
        latency: float = 0.0,
    ) -> None:
        self.pages = pages or []
        self.by_iata = by_iata or {}
        self.by_city = by_city or {}
        self.fail_on_page = fail_on_page
        self.fail_all = fail_all
        self.fail_next = list(fail_next or [])
        self.latency = latency
        self.requests: list[httpx.Request] = []
        self.on_page_served: Any = None

    @staticmethod
    def _error(status: int) -> httpx.Response:
        return httpx.Response(
            status,
            json={
                "errors": [
                    {"message": "Upstream unavailable", "code": "internal_server_error"}
                ]
            },
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_next:
            return self._error(self.fail_next.pop(0))
        if self.fail_all:
            return self._error(500)

        params = request.url.params
        if "filter[iata_code]" in params:
            data = self.by_iata.get(params["filter[iata_code]"], [])
            return httpx.Response(200, json={"data": data, "meta": {"after": None}})
        if "filter[city_name]" in params:
            data = self.by_city.get(params["filter[city_name]"], [])
            return httpx.Response(200, json={"data": data, "meta": {"after": None}})

        index = int(params.get("after") or 0)
        if self.fail_on_page == index + 1:
            return self._error(500)
        data = self.pages[index] if index < len(self.pages) else []
        after = str(index + 1) if index + 1 < len(self.pages) else None
        if self.on_page_served is not None:
            self.on_page_served(index + 1)
        return httpx.Response(200, json={"data": data, "meta": {"after": after}})

    async def handle_async(self, request: httpx.Request) -> httpx.Response:
        if self.latency:
            await asyncio.sleep(self.latency)
        return self(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle_async)

    @property
    def catalog_requests(self) -> list[httpx.Request]:
        return [
            r
            for r in self.requests
            if "filter[iata_code]" not in r.url.params
            and "filter[city_name]" not in r.url.params
        ]


class FakeClock:
    """Manually advanced replacement for ``time.time``."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def make_settings():
    """Factory for settings isolated from the environment and .env files."""

    def _make(token: str | None = "test-token", **overrides: Any) -> LookupSettings:
        values: dict[str, Any] = {
            "remote_api_token": token,
            "remote_max_retries": 0,
            "remote_retry_base_delay": 0.0,
            "redis_url": None,
            "cache_dir": None,
        }
        values.update(overrides)
        return LookupSettings(_env_file=None, **values)

    return _make


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def catalog_pages() -> list[list[dict[str, Any]]]:
    """Three small catalog pages."""
    return [
        [
            duffel_airport("LHR", "Heathrow Airport", "London", lat=51.47, lon=-0.4543),
            duffel_airport("SEN", "London Southend Airport", "London"),
        ],
        [
            duffel_airport("JFK", "John F. Kennedy International Airport", "New York", "US"),
            duffel_airport("DXB", "Dubai International Airport", "Dubai", "AE"),
        ],
        [
            duffel_airport("LGW", "Gatwick Airport", "London"),
            duffel_airport("GRU", "Guarulhos International Airport", "São Paulo", "BR"),
        ],
    ]
