"""Cache key builders for consistent namespacing."""

from __future__ import annotations


def catalog_key() -> str:
    """Durable key holding the full remote catalog snapshot."""
    return "airports:catalog:v1"


def recent_selections_key() -> str:
    """Durable key holding the user's recent airport selections."""
    return "airports:recent:v1"


def session_key(query: str) -> str:
    """Session-cache key for a raw search query."""
    return query.lower()
