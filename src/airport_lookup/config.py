"""Lookup configuration via environment variables."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class LookupSettings(BaseSettings):
    """Settings loaded from environment / .env file."""

    model_config = SettingsConfigDict(
        env_prefix="AIRPORTS_", env_file=".env", extra="ignore"
    )

    # Duffel API (no token = local-only lookups)
    remote_api_token: str | None = None
    remote_base_url: str = "https://api.duffel.com"
    remote_api_version: str = "v2"

    # Timeouts (seconds) and retries
    remote_timeout: int = 20
    remote_max_retries: int = 2
    remote_retry_base_delay: float = 0.5

    # Catalog pagination
    catalog_page_size: int = 200  # API maximum
    catalog_max_pages: int = 100

    # Cache TTLs in seconds
    catalog_ttl: int = 24 * 60 * 60  # 24 hours

    # Result shaping
    result_limit: int = 10
    recent_limit: int = 10
    background_threshold: int = 5

    # Durable storage (redis wins over cache_dir; neither = in-memory)
    redis_url: str | None = None
    cache_dir: Path | None = None


settings = LookupSettings()
