"""Airport lookup service: the single entry point used by the picker UI."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING

from airport_lookup.cache import CacheManager, SessionResultCache, build_store
from airport_lookup.cache.cache_keys import session_key
from airport_lookup.config import settings as default_settings
from airport_lookup.dataset import LocalDataset
from airport_lookup.dataset.local import MIN_QUERY_LENGTH
from airport_lookup.exceptions import AirportLookupError, RemoteTransportError
from airport_lookup.ranking import dedupe, filter_catalog, merge
from airport_lookup.remote import RemoteCatalogFetcher
from airport_lookup.text import is_iata_like

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    import httpx

    from airport_lookup.cache import KeyValueStore
    from airport_lookup.config import LookupSettings
    from airport_lookup.schemas import AirportOption

logger = logging.getLogger(__name__)

# Shown before the user types anything, when the catalog is loaded.
MAJOR_HUB_CODES: list[str] = [
    "LHR",
    "JFK",
    "DXB",
    "CDG",
    "NRT",
    "LAX",
    "SIN",
    "AMS",
    "FRA",
    "ORD",
]


class AirportLookupService:
    """Blends the bundled dataset, the Duffel catalog and user history.

    One instance per process. It owns the session result cache and the
    background refresh tasks; the :class:`CacheManager` it builds owns the
    catalog snapshot and the recents list.
    """

    def __init__(
        self,
        settings: LookupSettings | None = None,
        *,
        dataset: LocalDataset | None = None,
        store: KeyValueStore | None = None,
        fetcher: RemoteCatalogFetcher | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._settings = settings or default_settings
        self._dataset = dataset if dataset is not None else LocalDataset()
        self._store = store if store is not None else build_store(self._settings)
        self._fetcher = fetcher or RemoteCatalogFetcher(
            self._settings, transport=transport, clock=clock
        )
        self._cache = CacheManager(
            self._fetcher,
            self._store,
            ttl=self._settings.catalog_ttl,
            recent_limit=self._settings.recent_limit,
            clock=clock,
        )
        self._session = SessionResultCache()
        self._refreshes: dict[str, asyncio.Task[None]] = {}

    @property
    def cache(self) -> CacheManager:
        return self._cache

    @property
    def session_cache(self) -> SessionResultCache:
        return self._session

    async def __aenter__(self) -> AirportLookupService:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        """Warm the catalog cache at startup; failures only get logged."""
        try:
            snapshot = await self._cache.get_fresh_catalog()
        except AirportLookupError as exc:
            logger.warning("Failed to initialise airport catalog: %s", exc)
            return
        logger.info("Airport catalog ready (%d airports)", len(snapshot.airports))

    # ------------------------------------------------------------------
    # Text search
    # ------------------------------------------------------------------

    async def search(self, query: str) -> list[AirportOption]:
        """Return up to ``result_limit`` airports for a user-typed query.

        Never raises for network or storage trouble: the worst case is the
        local matches, possibly none.
        """
        if not isinstance(query, str):
            raise TypeError(f"query must be str, not {type(query).__name__}")
        if len(query) < MIN_QUERY_LENGTH:
            return []

        cached = self._session.get(query)
        if cached is not None:
            return cached

        limit = self._settings.result_limit
        local = self._dataset.match(query, limit)

        # Typed IATA code: one targeted request beats waiting for the catalog.
        if is_iata_like(query):
            direct = await self._fetcher.fetch_direct(query)
            if direct:
                merged = merge(local, direct, limit)
                self._session.set(query, merged)
                return merged

        if len(local) >= self._settings.background_threshold:
            self._spawn_refresh(query, local)
            return local

        try:
            remote = await self._search_catalog(query)
        except RemoteTransportError as exc:
            logger.warning(
                "Catalog search for %r failed, trying direct lookup: %s", query, exc
            )
            remote = await self._fetcher.fetch_direct(query)

        merged = merge(local, remote, limit)
        self._session.set(query, merged)
        return merged

    async def _search_catalog(self, query: str) -> list[AirportOption]:
        snapshot = await self._cache.get_fresh_catalog()
        if snapshot.is_empty:
            return []
        return filter_catalog(snapshot.airports, query, self._settings.result_limit)

    def _spawn_refresh(self, query: str, local: list[AirportOption]) -> None:
        key = session_key(query)
        running = self._refreshes.get(key)
        if running is not None and not running.done():
            return
        task = asyncio.create_task(
            self._refresh_in_background(query, local),
            name=f"airport-refresh:{key}",
        )
        self._refreshes[key] = task
        task.add_done_callback(lambda t: self._forget_refresh(key, t))

    def _forget_refresh(self, key: str, task: asyncio.Task[None]) -> None:
        if self._refreshes.get(key) is task:
            del self._refreshes[key]

    async def _refresh_in_background(
        self, query: str, local: list[AirportOption]
    ) -> None:
        """Replace the session entry for *query* with catalog-backed results."""
        try:
            remote = await self._search_catalog(query)
        except RemoteTransportError as exc:
            logger.warning("Background airport refresh for %r failed: %s", query, exc)
            self._session.set(query, local)
            return
        except Exception:
            logger.exception("Unexpected error refreshing airports for %r", query)
            self._session.set(query, local)
            return

        if remote:
            self._session.set(query, merge(local, remote, self._settings.result_limit))
            logger.debug(
                "Background refresh for %r merged %d remote results",
                query,
                len(remote),
            )

    async def wait_for_background(self) -> None:
        """Wait for every in-flight background refresh to finish."""
        tasks = list(self._refreshes.values())
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    def nearest_airports(
        self, lat: float, lon: float, limit: int = 5
    ) -> list[AirportOption]:
        """Bundled airports closest to ``(lat, lon)``, nearest first."""
        return self._dataset.nearest(lat, lon, limit)

    def get_top_airports(self, limit: int = 20) -> list[AirportOption]:
        """Default list before typing: major hubs when the catalog is loaded."""
        snapshot = self._cache.cached_catalog()
        if snapshot is None:
            return self._dataset.head(limit)
        hubs = snapshot.by_iata(MAJOR_HUB_CODES)
        return dedupe([*hubs, *self._dataset], limit)

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    async def get_recent_searches(self) -> list[AirportOption]:
        return await self._cache.get_recent_selections()

    async def save_recent_search(self, airport: AirportOption) -> None:
        await self._cache.record_selection(airport)

    def clear_session_cache(self) -> None:
        """Forget memoized search results; catalog and recents are kept."""
        self._session.clear()

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    async def aclose(self) -> None:
        """Cancel pending refreshes and release HTTP and storage resources."""
        for task in self._refreshes.values():
            task.cancel()
        await self.wait_for_background()
        await self._cache.aclose()
        await self._fetcher.close()
        await self._store.close()
