"""Tests for the search orchestration in AirportLookupService."""

from __future__ import annotations

import asyncio

import pytest

from airport_lookup.schemas import OptionSource
from airport_lookup.service import AirportLookupService

from .conftest import FakeDuffel, duffel_airport, option

JFK = duffel_airport("JFK", "John F. Kennedy International Airport", "New York", "US")
HEATHROW = duffel_airport("LHR", "Heathrow Airport", "London", lat=51.47, lon=-0.4543)


@pytest.fixture
async def make_service(make_settings, store, clock):
    services: list[AirportLookupService] = []

    def _make(fake: FakeDuffel | None = None, **overrides) -> AirportLookupService:
        fake = fake or FakeDuffel()
        service = AirportLookupService(
            make_settings(**overrides),
            store=store,
            transport=fake.transport,
            clock=clock,
        )
        services.append(service)
        return service

    yield _make
    for service in services:
        await service.aclose()


def codes(airports) -> list[str]:
    return [a.iata for a in airports]


def assert_well_formed(results) -> None:
    assert len(results) <= 10
    assert len(codes(results)) == len(set(codes(results)))


class TestSearchBasics:
    async def test_short_query_does_no_io(self, make_service) -> None:
        fake = FakeDuffel()
        service = make_service(fake)

        assert await service.search("") == []
        assert await service.search("L") == []
        assert fake.requests == []

    async def test_rejects_non_string(self, make_service) -> None:
        with pytest.raises(TypeError):
            await make_service().search(None)  # type: ignore[arg-type]

    async def test_without_token_uses_local_data(self, make_service) -> None:
        service = make_service(token=None)

        results = await service.search("Lon")
        await service.wait_for_background()

        assert "LHR" in codes(results)
        assert all(a.source is OptionSource.LOCAL for a in results)
        assert_well_formed(results)


class TestDirectLookup:
    async def test_iata_query_uses_direct_lookup(self, make_service) -> None:
        fake = FakeDuffel(by_iata={"JFK": [JFK]})
        service = make_service(fake)

        results = await service.search("JFK")

        assert results[0].iata == "JFK"
        assert results[0].source is OptionSource.REMOTE
        assert fake.catalog_requests == []
        assert_well_formed(results)

    async def test_plain_string_city_in_direct_lookup(self, make_service) -> None:
        record = duffel_airport("JFK", "John F Kennedy", "", "US")
        record["city_name"] = None
        record["city"] = "New York"
        service = make_service(FakeDuffel(by_iata={"JFK": [record]}))

        results = await service.search("JFK")

        assert results[0].iata == "JFK"
        assert results[0].city == "New York"
        assert_well_formed(results)

    async def test_results_are_memoised(self, make_service) -> None:
        fake = FakeDuffel(by_iata={"JFK": [JFK]})
        service = make_service(fake)

        first = await service.search("JFK")
        seen = len(fake.requests)
        second = await service.search("jfk")

        assert second == first
        assert len(fake.requests) == seen


class TestCatalogSearch:
    async def test_few_local_matches_wait_for_catalog(
        self, make_service, catalog_pages
    ) -> None:
        fake = FakeDuffel(catalog_pages)
        service = make_service(fake)

        results = await service.search("Gatwick")

        assert codes(results) == ["LGW"]
        assert results[0].source is OptionSource.REMOTE
        assert len(fake.catalog_requests) == 3

    async def test_catalog_failure_falls_back_to_direct(
        self, make_service, catalog_pages
    ) -> None:
        fake = FakeDuffel(catalog_pages, by_city={"Heathrow": [HEATHROW]}, fail_on_page=1)
        service = make_service(fake)

        results = await service.search("Heathrow")

        assert codes(results) == ["LHR"]
        assert results[0].source is OptionSource.REMOTE

    async def test_total_remote_failure_returns_local(self, make_service) -> None:
        service = make_service(FakeDuffel(fail_all=True))

        results = await service.search("Gatwick")

        assert codes(results) == ["LGW"]
        assert results[0].source is OptionSource.LOCAL

    async def test_clear_session_cache_keeps_catalog(
        self, make_service, catalog_pages
    ) -> None:
        fake = FakeDuffel(catalog_pages)
        service = make_service(fake)
        await service.search("Gatwick")

        service.clear_session_cache()

        assert len(service.session_cache) == 0
        assert service.cache.cached_catalog() is not None
        await service.search("Gatwick")
        assert len(fake.catalog_requests) == 3

    async def test_concurrent_searches_share_one_catalog_download(
        self, make_service, catalog_pages
    ) -> None:
        fake = FakeDuffel(catalog_pages, latency=0.01)
        service = make_service(fake)

        gatwick, guarulhos, _ = await asyncio.gather(
            service.search("Gatwick"),
            service.search("Guarulhos"),
            service.search("Dubai Intl"),
        )

        assert len(fake.catalog_requests) == 3
        assert codes(gatwick) == ["LGW"]
        assert codes(guarulhos) == ["GRU"]

    async def test_plain_string_city_in_catalog(self, make_service) -> None:
        record = duffel_airport("QZV", "Qzzv Field", "", "US")
        record["city_name"] = None
        record["city"] = "Qzzville"
        service = make_service(FakeDuffel([[record]]))

        results = await service.search("Qzzv")

        assert [(a.iata, a.city) for a in results] == [("QZV", "Qzzville")]


class TestBackgroundRefresh:
    async def test_many_local_matches_return_immediately(
        self, make_service, catalog_pages
    ) -> None:
        fake = FakeDuffel(catalog_pages)
        service = make_service(fake)

        immediate = await service.search("London")
        assert all(a.source is OptionSource.LOCAL for a in immediate)
        assert "SEN" not in codes(immediate)

        await service.wait_for_background()
        refreshed = await service.search("London")

        assert "SEN" in codes(refreshed)
        assert codes(refreshed)[:3] == ["LHR", "SEN", "LGW"]
        assert_well_formed(refreshed)

    async def test_refresh_is_not_spawned_twice(self, make_service, catalog_pages) -> None:
        fake = FakeDuffel(catalog_pages)
        service = make_service(fake)

        await service.search("London")
        service.clear_session_cache()
        await service.search("london")
        await service.wait_for_background()

        assert len(fake.catalog_requests) == 3

    async def test_failed_refresh_memoises_local_results(self, make_service) -> None:
        fake = FakeDuffel(fail_all=True)
        service = make_service(fake)

        immediate = await service.search("London")
        await service.wait_for_background()
        seen = len(fake.requests)

        assert await service.search("London") == immediate
        assert len(fake.requests) == seen

    async def test_aclose_cancels_pending_refresh(
        self, make_service, catalog_pages
    ) -> None:
        service = make_service(FakeDuffel(catalog_pages))

        await service.search("London")
        await service.aclose()

        assert service._refreshes == {}


class TestListings:
    async def test_nearest_airports(self, make_service) -> None:
        nearest = make_service().nearest_airports(51.5, -0.12, limit=3)
        assert len(nearest) == 3
        assert nearest[0].iata == "LCY"

    async def test_top_airports_without_catalog(self, make_service) -> None:
        top = make_service(token=None).get_top_airports(5)
        assert codes(top) == ["LHR", "JFK", "DXB", "CDG", "NRT"]
        assert all(a.source is OptionSource.LOCAL for a in top)

    async def test_top_airports_with_catalog(self, make_service, catalog_pages) -> None:
        service = make_service(FakeDuffel(catalog_pages))
        await service.initialize()

        top = service.get_top_airports(20)

        assert len(top) == 20
        assert codes(top)[:3] == ["LHR", "JFK", "DXB"]
        assert top[0].source is OptionSource.REMOTE
        assert len(set(codes(top))) == 20

    async def test_initialize_swallows_failures(self, make_service) -> None:
        service = make_service(FakeDuffel(fail_all=True))

        await service.initialize()

        assert service.cache.cached_catalog() is None


class TestRecents:
    async def test_save_and_list(self, make_service) -> None:
        service = make_service()

        await service.save_recent_search(option("CDG", "Paris"))
        await service.save_recent_search(option("FCO", "Rome"))

        assert codes(await service.get_recent_searches()) == ["FCO", "CDG"]
