"""Airport option and catalog snapshot models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .enums import OptionSource, OptionType


class AirportOption(BaseModel):
    """A single selectable airport or city."""

    model_config = ConfigDict(frozen=True)

    iata: str = Field(description="IATA code, unique within a result list")
    name: str
    city: str
    country: str
    region: str | None = None
    lat: float | None = None
    lon: float | None = None
    source: OptionSource = OptionSource.LOCAL
    type: OptionType = OptionType.AIRPORT

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lon is not None


class CatalogSnapshot(BaseModel):
    """The complete remote catalog as captured at ``captured_at`` (epoch seconds)."""

    model_config = ConfigDict(frozen=True)

    airports: tuple[AirportOption, ...] = ()
    captured_at: float = 0.0

    @property
    def is_empty(self) -> bool:
        return not self.airports

    def age(self, now: float) -> float:
        return now - self.captured_at

    def is_fresh(self, ttl: float, now: float) -> bool:
        """True when the snapshot holds data and is younger than *ttl* seconds."""
        return not self.is_empty and self.age(now) < ttl

    def by_iata(self, codes: list[str]) -> list[AirportOption]:
        """Catalog entries for *codes* in the order given; unknown codes are skipped."""
        index: dict[str, AirportOption] = {}
        for airport in self.airports:
            index.setdefault(airport.iata, airport)
        return [index[code] for code in codes if code in index]
