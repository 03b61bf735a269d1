"""Bundled airport dataset and the searches that run over it."""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from importlib import resources
from typing import TYPE_CHECKING

from airport_lookup.geo import distance_km
from airport_lookup.schemas import AirportOption, OptionSource
from airport_lookup.text import normalize

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2
DEFAULT_MATCH_LIMIT = 10


@lru_cache(maxsize=1)
def load_bundled_airports() -> tuple[AirportOption, ...]:
    """Read ``top_airports.json`` shipped with the package (once per process)."""
    data_path = resources.files("airport_lookup.data").joinpath("top_airports.json")
    with data_path.open(encoding="utf-8") as f:
        rows = json.load(f)
    airports = tuple(
        AirportOption.model_validate({**row, "source": OptionSource.LOCAL})
        for row in rows
    )
    logger.debug("Loaded %d bundled airports", len(airports))
    return airports


def _searchable_text(airport: AirportOption) -> str:
    parts = [airport.city, airport.name, airport.iata, airport.region, airport.country]
    return normalize(" ".join(p for p in parts if p))


class LocalDataset:
    """Read-only, in-memory airport list searched synchronously."""

    def __init__(self, airports: Iterable[AirportOption] | None = None) -> None:
        self._airports = (
            tuple(airports) if airports is not None else load_bundled_airports()
        )
        # Precomputed once; the dataset never changes.
        self._haystacks = tuple(_searchable_text(a) for a in self._airports)

    def __len__(self) -> int:
        return len(self._airports)

    def __iter__(self) -> Iterator[AirportOption]:
        return iter(self._airports)

    def match(
        self, query: str, limit: int = DEFAULT_MATCH_LIMIT
    ) -> list[AirportOption]:
        """Substring match on city, name, iata, region and country (dataset order)."""
        if len(query) < MIN_QUERY_LENGTH:
            return []
        needle = normalize(query)
        results: list[AirportOption] = []
        for airport, haystack in zip(self._airports, self._haystacks, strict=True):
            if needle in haystack:
                results.append(airport)
                if len(results) >= limit:
                    break
        return results

    def nearest(self, lat: float, lon: float, limit: int = 5) -> list[AirportOption]:
        """Entries with coordinates, closest to ``(lat, lon)`` first."""
        ranked = sorted(
            (
                (distance_km(lat, lon, a.lat, a.lon), a)  # type: ignore[arg-type]
                for a in self._airports
                if a.has_coordinates
            ),
            key=lambda pair: pair[0],
        )
        return [airport for _, airport in ranked[:limit]]

    def head(self, limit: int) -> list[AirportOption]:
        """First *limit* entries in dataset order."""
        return list(self._airports[:limit])
