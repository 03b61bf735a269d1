"""Merge, filter and rank airport results from several sources."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from airport_lookup.text import normalize

if TYPE_CHECKING:
    from collections.abc import Iterable

    from airport_lookup.schemas import AirportOption

logger = logging.getLogger(__name__)

RESULT_LIMIT = 10


def dedupe(
    airports: Iterable[AirportOption], limit: int | None = None
) -> list[AirportOption]:
    """Keep the first occurrence of each IATA code, up to *limit* entries."""
    seen: set[str] = set()
    unique: list[AirportOption] = []
    for airport in airports:
        if airport.iata in seen:
            continue
        seen.add(airport.iata)
        unique.append(airport)
        if limit is not None and len(unique) >= limit:
            break
    return unique


def merge(
    local: list[AirportOption],
    remote: list[AirportOption],
    limit: int = RESULT_LIMIT,
) -> list[AirportOption]:
    """Remote results first, then local ones with an unseen IATA code.

    Remote entries win ties; local entries only fill the gaps.
    """
    return dedupe([*remote, *local], limit)


def is_exact_match(airport: AirportOption, normalized_query: str) -> bool:
    return (
        normalize(airport.iata) == normalized_query
        or normalize(airport.city) == normalized_query
    )


def rank_by_relevance(
    results: list[AirportOption], normalized_query: str
) -> list[AirportOption]:
    """Exact IATA/city hits first, then substring hits; each tier by city name."""
    return sorted(
        results,
        key=lambda a: (not is_exact_match(a, normalized_query), a.city),
    )


def filter_catalog(
    catalog: Iterable[AirportOption],
    query: str,
    limit: int = RESULT_LIMIT,
) -> list[AirportOption]:
    """Catalog entries whose name, city, iata or country contains *query*, ranked."""
    needle = normalize(query)
    matches = [
        a
        for a in catalog
        if needle in normalize(a.name)
        or needle in normalize(a.city)
        or needle in normalize(a.iata)
        or needle in normalize(a.country)
    ]
    ranked = rank_by_relevance(matches, needle)
    logger.debug("Catalog filter %r matched %d airports", query, len(matches))
    return dedupe(ranked, limit)
