"""Bundled local airport data."""

from .local import LocalDataset, load_bundled_airports

__all__ = ["LocalDataset", "load_bundled_airports"]
