"""Display strings for airport options."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from airport_lookup.schemas import AirportOption


def _city_label(airport: AirportOption) -> str:
    return f"{airport.city}, {airport.region}" if airport.region else airport.city


def format_airport_display(airport: AirportOption) -> str:
    """``London, England — Heathrow Airport (LHR) • United Kingdom``"""
    return (
        f"{_city_label(airport)} — {airport.name} ({airport.iata}) • {airport.country}"
    )


def format_airport_compact(airport: AirportOption) -> str:
    """``London, England (LHR)``, as shown inside input fields."""
    return f"{_city_label(airport)} ({airport.iata})"
