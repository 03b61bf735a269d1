"""Text normalization for query matching."""

from __future__ import annotations

import unicodedata


def normalize(text: str) -> str:
    """Lower-case *text* and strip combining diacritical marks.

    ``normalize("São Paulo") == normalize("Sao Paulo") == "sao paulo"``
    """
    decomposed = unicodedata.normalize("NFD", text.lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def is_iata_like(query: str) -> bool:
    """True for exactly three ASCII letters (a probable IATA code)."""
    return len(query) == 3 and query.isascii() and query.isalpha()
