"""Remote (Duffel) airport catalog access."""

from .catalog import RemoteCatalogFetcher
from .client import DuffelClient

__all__ = ["DuffelClient", "RemoteCatalogFetcher"]
