"""Parse Duffel airport records into :class:`AirportOption` objects."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from airport_lookup.exceptions import RemoteTransportError
from airport_lookup.schemas import AirportOption, OptionSource, OptionType

logger = logging.getLogger(__name__)


def _float_or_none(value: Any) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def parse_airport(record: dict[str, Any]) -> AirportOption | None:
    """Normalize one Duffel airport; records without a code or name are dropped."""
    iata = str(record.get("iata_code") or "").strip().upper()
    name = str(record.get("name") or "").strip()
    if not iata or not name:
        return None

    # `city` is either a nested city object or a bare city name.
    city = record.get("city")
    if isinstance(city, dict):
        city = city.get("name")
    city = record.get("city_name") or city or name
    country = record.get("iata_country_code") or record.get("country") or ""
    kind = OptionType.CITY if record.get("type") == "city" else OptionType.AIRPORT

    return AirportOption(
        iata=iata,
        name=name,
        city=str(city).strip(),
        country=str(country).strip(),
        lat=_float_or_none(record.get("latitude")),
        lon=_float_or_none(record.get("longitude")),
        source=OptionSource.REMOTE,
        type=kind,
    )


def parse_airport_page(
    payload: dict[str, Any],
) -> tuple[list[AirportOption], str | None]:
    """Return ``(airports, next_cursor)`` for one ``/air/airports`` page."""
    records = payload.get("data")
    if not isinstance(records, list):
        raise RemoteTransportError("Duffel airport response has no 'data' list")

    airports: list[AirportOption] = []
    skipped = 0
    for record in records:
        try:
            airport = parse_airport(record) if isinstance(record, dict) else None
        except (ValidationError, TypeError, AttributeError) as exc:
            logger.warning("Skipping malformed Duffel airport record: %s", exc)
            airport = None
        if airport is None:
            skipped += 1
            continue
        airports.append(airport)

    if skipped:
        logger.debug("Skipped %d unusable airport records", skipped)

    meta = payload.get("meta") or {}
    cursor = meta.get("after") if isinstance(meta, dict) else None
    return airports, cursor or None
