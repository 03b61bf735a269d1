"""HTTP client for the Duffel airports endpoint."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from airport_lookup.exceptions import ConfigurationMissing, RemoteTransportError
from airport_lookup.retry import async_retry

if TYPE_CHECKING:
    from airport_lookup.config import LookupSettings

logger = logging.getLogger(__name__)

AIRPORTS_PATH = "/air/airports"


def is_transient(exc: Exception) -> bool:
    """Connection problems, rate limiting and server errors are worth retrying."""
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status == 429 or status >= 500
    return False


def _to_transport_error(exc: httpx.HTTPStatusError) -> RemoteTransportError:
    """Build a RemoteTransportError from Duffel's ``{"errors": [...]}`` envelope."""
    status = exc.response.status_code
    message = f"Duffel API error: {status}"
    code = None
    try:
        errors = exc.response.json().get("errors") or []
    except ValueError:
        errors = []
    if errors and isinstance(errors[0], dict):
        message = errors[0].get("message") or message
        code = errors[0].get("code")
    return RemoteTransportError(message, status_code=status, code=code)


class DuffelClient:
    """Thin async wrapper around ``GET /air/airports``."""

    def __init__(
        self,
        *,
        token: str | None,
        base_url: str = "https://api.duffel.com",
        api_version: str = "v2",
        timeout: int = 20,
        max_retries: int = 2,
        retry_base_delay: float = 0.5,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not token:
            raise ConfigurationMissing(
                "AIRPORTS_REMOTE_API_TOKEN must be set to query the Duffel API"
            )
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/json",
                "Duffel-Version": api_version,
            },
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )
        self._get_json = async_retry(
            max_retries=max_retries,
            base_delay=retry_base_delay,
            retry_if=is_transient,
            exceptions=(httpx.HTTPStatusError, httpx.TransportError),
        )(self._get_json_once)

    @classmethod
    def from_settings(
        cls,
        settings: LookupSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> DuffelClient:
        return cls(
            token=settings.remote_api_token,
            base_url=settings.remote_base_url,
            api_version=settings.remote_api_version,
            timeout=settings.remote_timeout,
            max_retries=settings.remote_max_retries,
            retry_base_delay=settings.remote_retry_base_delay,
            transport=transport,
        )

    async def _get_json_once(self, path: str, params: dict[str, Any]) -> Any:
        resp = await self._client.get(path, params=params)
        resp.raise_for_status()
        return resp.json()

    async def list_airports(self, params: dict[str, Any]) -> dict[str, Any]:
        """Call ``GET /air/airports`` and return the parsed JSON body.

        Raises :class:`RemoteTransportError` once retries are exhausted or
        the failure is not transient.
        """
        try:
            data = await self._get_json(AIRPORTS_PATH, params)
        except httpx.HTTPStatusError as exc:
            raise _to_transport_error(exc) from exc
        except httpx.TransportError as exc:
            raise RemoteTransportError(f"Duffel transport error: {exc}") from exc
        except ValueError as exc:
            raise RemoteTransportError(f"Duffel returned invalid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise RemoteTransportError("Duffel returned an unexpected payload")
        logger.debug(
            "Duffel airports returned %d records (params=%s)",
            len(data.get("data") or []),
            params,
        )
        return data

    async def close(self) -> None:
        """Shut down the underlying HTTPX client."""
        await self._client.aclose()
