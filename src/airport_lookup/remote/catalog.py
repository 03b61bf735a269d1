"""Remote airport catalog: full paginated download and direct single queries."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

from airport_lookup.exceptions import (
    CatalogFetchCancelled,
    ConfigurationMissing,
    RemoteFetchIncomplete,
    RemoteTransportError,
)
from airport_lookup.schemas import AirportOption, CatalogSnapshot

from .client import DuffelClient
from .response_parser import parse_airport_page

if TYPE_CHECKING:
    import asyncio
    from collections.abc import Callable

    import httpx

    from airport_lookup.config import LookupSettings

logger = logging.getLogger(__name__)


class RemoteCatalogFetcher:
    """Reads airports from Duffel, degrading to "no data" without a token."""

    def __init__(
        self,
        settings: LookupSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._settings = settings
        self._clock = clock
        self._client: DuffelClient | None = None
        try:
            self._client = DuffelClient.from_settings(settings, transport=transport)
        except ConfigurationMissing:
            logger.info("No Duffel API token; remote airport lookups disabled")

    @property
    def configured(self) -> bool:
        return self._client is not None

    # ------------------------------------------------------------------
    # Full-catalog mode
    # ------------------------------------------------------------------

    async def fetch_full_catalog(
        self, cancel: asyncio.Event | None = None
    ) -> CatalogSnapshot:
        """Download every catalog page, following ``meta.after`` cursors.

        Returns an empty snapshot when no token is configured. Any failure
        part-way raises :class:`RemoteFetchIncomplete` and nothing gathered so
        far is returned. Setting *cancel* stops the loop before the next page.
        """
        if self._client is None:
            return CatalogSnapshot(captured_at=self._clock())

        airports: list[AirportOption] = []
        cursor: str | None = None
        pages = 0
        started = time.monotonic()

        while True:
            if cancel is not None and cancel.is_set():
                raise CatalogFetchCancelled(
                    f"Catalog fetch cancelled after {pages} page(s)",
                    pages_fetched=pages,
                )
            if pages >= self._settings.catalog_max_pages:
                raise RemoteFetchIncomplete(
                    f"Catalog still paginating after {pages} pages",
                    pages_fetched=pages,
                )

            params: dict[str, Any] = {"limit": self._settings.catalog_page_size}
            if cursor:
                params["after"] = cursor

            try:
                payload = await self._client.list_airports(params)
                page, cursor = parse_airport_page(payload)
            except RemoteTransportError as exc:
                raise RemoteFetchIncomplete(
                    f"Catalog fetch failed on page {pages + 1}: {exc}",
                    pages_fetched=pages,
                    status_code=exc.status_code,
                    code=exc.code,
                ) from exc

            pages += 1
            airports.extend(page)
            logger.debug("Catalog page %d: %d airports", pages, len(page))
            if not cursor:
                break

        logger.info(
            "Fetched airport catalog: %d airports in %d page(s) (%.1fs)",
            len(airports),
            pages,
            time.monotonic() - started,
        )
        return CatalogSnapshot(airports=tuple(airports), captured_at=self._clock())

    # ------------------------------------------------------------------
    # Direct mode
    # ------------------------------------------------------------------

    @staticmethod
    async def _query(
        client: DuffelClient, filters: dict[str, str], limit: int
    ) -> list[AirportOption]:
        payload = await client.list_airports({**filters, "limit": limit})
        airports, _ = parse_airport_page(payload)
        return airports[:limit]

    async def fetch_direct(self, query: str) -> list[AirportOption]:
        """Look up *query* as an IATA code, then as a city name.

        Transport errors yield ``[]``: no remote contribution, not a failure.
        """
        client = self._client
        if client is None:
            return []

        limit = self._settings.result_limit
        try:
            results = await self._query(
                client, {"filter[iata_code]": query.upper()}, limit
            )
            if not results:
                results = await self._query(
                    client, {"filter[city_name]": query}, limit
                )
        except RemoteTransportError as exc:
            logger.warning("Direct airport lookup for %r failed: %s", query, exc)
            return []

        logger.debug("Direct airport lookup for %r: %d results", query, len(results))
        return results

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
