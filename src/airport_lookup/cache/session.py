"""Process-lifetime memo of search results."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .cache_keys import session_key

if TYPE_CHECKING:
    from airport_lookup.schemas import AirportOption


class SessionResultCache:
    """Maps a lower-cased query to its last computed result list.

    Each write replaces the whole entry; concurrent searches for the same
    query may overwrite each other and the last writer wins.
    """

    def __init__(self) -> None:
        self._entries: dict[str, tuple[AirportOption, ...]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, query: str) -> bool:
        return session_key(query) in self._entries

    def get(self, query: str) -> list[AirportOption] | None:
        entry = self._entries.get(session_key(query))
        return list(entry) if entry is not None else None

    def set(self, query: str, results: list[AirportOption]) -> None:
        self._entries[session_key(query)] = tuple(results)

    def clear(self) -> None:
        self._entries.clear()
