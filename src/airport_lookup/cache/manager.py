"""Two-tier catalog cache and persisted recent selections."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from typing import TYPE_CHECKING

from pydantic import TypeAdapter, ValidationError

from airport_lookup.exceptions import AirportLookupError, StorageFault
from airport_lookup.schemas import AirportOption, CatalogSnapshot

from .cache_keys import catalog_key, recent_selections_key

if TYPE_CHECKING:
    from collections.abc import Callable

    from airport_lookup.remote import RemoteCatalogFetcher

    from .store import KeyValueStore

logger = logging.getLogger(__name__)

_recent_adapter = TypeAdapter(list[AirportOption])


class CacheManager:
    """Owns the catalog snapshot (memory + durable tier) and the recents list.

    Storage faults never escape: reads degrade to "nothing cached" and
    writes are logged and dropped.
    """

    def __init__(
        self,
        fetcher: RemoteCatalogFetcher,
        store: KeyValueStore,
        *,
        ttl: float = 24 * 60 * 60,
        recent_limit: int = 10,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._fetcher = fetcher
        self._store = store
        self._ttl = ttl
        self._recent_limit = recent_limit
        self._clock = clock
        self._snapshot: CatalogSnapshot | None = None
        self._inflight: asyncio.Task[CatalogSnapshot] | None = None

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    def cached_catalog(self) -> CatalogSnapshot | None:
        """In-memory snapshot if it is still fresh; never touches I/O."""
        if self._snapshot is not None and self._snapshot.is_fresh(
            self._ttl, self._clock()
        ):
            return self._snapshot
        return None

    async def get_fresh_catalog(
        self, cancel: asyncio.Event | None = None
    ) -> CatalogSnapshot:
        """Memory, then durable storage, then a full remote fetch.

        Raises whatever :meth:`refresh_catalog` raises when both tiers are
        stale or empty and the fetch fails.
        """
        snapshot = self.cached_catalog()
        if snapshot is not None:
            logger.debug(
                "Using in-memory catalog (%d airports)", len(snapshot.airports)
            )
            return snapshot

        snapshot = await self._load_durable_catalog()
        if snapshot is not None:
            self._snapshot = snapshot
            logger.info(
                "Promoted stored catalog to memory (%d airports)",
                len(snapshot.airports),
            )
            return snapshot

        return await self.refresh_catalog(cancel)

    async def refresh_catalog(
        self, cancel: asyncio.Event | None = None
    ) -> CatalogSnapshot:
        """Fetch a new snapshot and swap it into both tiers.

        Concurrent callers share one download; *cancel* only applies to the
        caller that starts it. On failure the previous snapshot stays in
        place untouched. An empty snapshot (no credential) is returned but
        never cached.
        """
        if self._inflight is None:
            self._inflight = asyncio.create_task(
                self._fetch_and_store(cancel), name="airport-catalog-refresh"
            )
        else:
            logger.debug("Joining in-flight catalog download")
        return await asyncio.shield(self._inflight)

    async def _fetch_and_store(
        self, cancel: asyncio.Event | None
    ) -> CatalogSnapshot:
        try:
            snapshot = await self._fetcher.fetch_full_catalog(cancel)
            if snapshot.is_empty:
                logger.debug("Remote catalog is empty; nothing cached")
                return snapshot

            self._snapshot = snapshot
            try:
                await self._store.set(catalog_key(), snapshot.model_dump_json())
            except StorageFault as exc:
                logger.warning("Could not persist airport catalog: %s", exc)
            return snapshot
        finally:
            self._inflight = None

    async def _load_durable_catalog(self) -> CatalogSnapshot | None:
        try:
            raw = await self._store.get(catalog_key())
        except StorageFault as exc:
            logger.warning("Could not read stored airport catalog: %s", exc)
            return None
        if raw is None:
            return None
        try:
            snapshot = CatalogSnapshot.model_validate_json(raw)
        except ValidationError as exc:
            logger.warning("Ignoring corrupted stored catalog: %s", exc)
            return None
        if not snapshot.is_fresh(self._ttl, self._clock()):
            logger.debug(
                "Stored catalog expired (age %.0fs)", snapshot.age(self._clock())
            )
            return None
        return snapshot

    # ------------------------------------------------------------------
    # Recent selections
    # ------------------------------------------------------------------

    async def get_recent_selections(self) -> list[AirportOption]:
        """Most-recent-first selections; ``[]`` if absent or unreadable."""
        try:
            raw = await self._store.get(recent_selections_key())
        except StorageFault as exc:
            logger.warning("Could not read recent selections: %s", exc)
            return []
        if not raw:
            return []
        try:
            return _recent_adapter.validate_json(raw)
        except ValidationError as exc:
            logger.warning("Ignoring corrupted recent selections: %s", exc)
            return []

    async def record_selection(self, airport: AirportOption) -> None:
        """Move *airport* to the front of the recents list (deduplicated by IATA)."""
        recent = await self.get_recent_selections()
        updated = [airport, *(a for a in recent if a.iata != airport.iata)]
        updated = updated[: self._recent_limit]
        try:
            await self._store.set(
                recent_selections_key(), _recent_adapter.dump_json(updated).decode()
            )
        except StorageFault as exc:
            logger.warning("Could not save recent selection %s: %s", airport.iata, exc)

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    async def aclose(self) -> None:
        """Cancel an in-flight catalog download, if any."""
        task = self._inflight
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError, AirportLookupError):
            await task
