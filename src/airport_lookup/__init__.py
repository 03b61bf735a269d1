"""Airport lookup: bundled dataset + Duffel catalog + ranked autocomplete."""

from airport_lookup.config import LookupSettings
from airport_lookup.exceptions import (
    AirportLookupError,
    CatalogFetchCancelled,
    ConfigurationMissing,
    RemoteFetchIncomplete,
    RemoteTransportError,
    StorageFault,
)
from airport_lookup.formatting import format_airport_compact, format_airport_display
from airport_lookup.geo import distance_km
from airport_lookup.ranking import merge, rank_by_relevance
from airport_lookup.schemas import (
    AirportOption,
    CatalogSnapshot,
    OptionSource,
    OptionType,
)
from airport_lookup.service import AirportLookupService
from airport_lookup.text import normalize

__all__ = [
    "AirportLookupError",
    "AirportLookupService",
    "AirportOption",
    "CatalogFetchCancelled",
    "CatalogSnapshot",
    "ConfigurationMissing",
    "LookupSettings",
    "OptionSource",
    "OptionType",
    "RemoteFetchIncomplete",
    "RemoteTransportError",
    "StorageFault",
    "distance_km",
    "format_airport_compact",
    "format_airport_display",
    "merge",
    "normalize",
    "rank_by_relevance",
]
