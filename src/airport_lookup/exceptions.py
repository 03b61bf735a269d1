"""Exceptions raised inside the airport lookup core."""

from __future__ import annotations


class AirportLookupError(Exception):
    """Base class for all lookup errors."""


class ConfigurationMissing(AirportLookupError):
    """No remote API credential is configured."""


class RemoteTransportError(AirportLookupError):
    """HTTP or network failure talking to the remote airport API."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code


class RemoteFetchIncomplete(RemoteTransportError):
    """Catalog pagination stopped before the last page.

    ``pages_fetched`` counts the pages received before the failure; the
    accumulated records are discarded.
    """

    def __init__(
        self,
        message: str,
        *,
        pages_fetched: int,
        status_code: int | None = None,
        code: str | None = None,
    ) -> None:
        super().__init__(message, status_code=status_code, code=code)
        self.pages_fetched = pages_fetched


class CatalogFetchCancelled(RemoteFetchIncomplete):
    """Catalog pagination was aborted through its cancel hook."""


class StorageFault(AirportLookupError):
    """Durable key-value storage read or write failed."""
