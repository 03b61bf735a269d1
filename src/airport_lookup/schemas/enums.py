"""Enums for airport lookup schemas."""

from enum import StrEnum


class OptionSource(StrEnum):
    """Where an airport option came from (UI affordance only)."""

    LOCAL = "local"
    REMOTE = "remote"


class OptionType(StrEnum):
    """Kind of place an option represents."""

    AIRPORT = "airport"
    CITY = "city"
