"""Core schemas for the airport lookup."""

from .airport import AirportOption, CatalogSnapshot
from .enums import OptionSource, OptionType

__all__ = [
    "AirportOption",
    "CatalogSnapshot",
    "OptionSource",
    "OptionType",
]
