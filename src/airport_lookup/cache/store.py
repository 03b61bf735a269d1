"""Durable key-value backends for catalog snapshots and recent selections."""

from __future__ import annotations

import asyncio
import logging
import os
import re
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import redis.asyncio as redis

from airport_lookup.exceptions import StorageFault

if TYPE_CHECKING:
    from pathlib import Path

    from airport_lookup.config import LookupSettings

logger = logging.getLogger(__name__)


@runtime_checkable
class KeyValueStore(Protocol):
    """String key-value storage; both operations may raise :class:`StorageFault`."""

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...

    async def close(self) -> None: ...


class MemoryKeyValueStore:
    """Process-lifetime store (first run, tests, no persistence configured)."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def close(self) -> None:
        self._data.clear()


_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class FileKeyValueStore:
    """One UTF-8 file per key under *cache_dir*; survives process restarts."""

    def __init__(self, cache_dir: Path) -> None:
        self.cache_dir = cache_dir

    def _path(self, key: str) -> Path:
        return self.cache_dir / f"{_UNSAFE_CHARS.sub('_', key)}.json"

    def _read(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def _write(self, key: str, value: str) -> None:
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(value, encoding="utf-8")
        os.replace(tmp, path)

    async def get(self, key: str) -> str | None:
        try:
            return await asyncio.to_thread(self._read, key)
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageFault(f"Cannot read {key!r}: {exc}") from exc

    async def set(self, key: str, value: str) -> None:
        try:
            await asyncio.to_thread(self._write, key, value)
        except OSError as exc:
            raise StorageFault(f"Cannot write {key!r}: {exc}") from exc

    async def close(self) -> None:
        """Nothing held open between calls."""


class RedisKeyValueStore:
    """Redis-backed store using the async client."""

    def __init__(self, url: str) -> None:
        self._redis = redis.from_url(url, decode_responses=True)
        logger.info("Redis store initialised: %s", url)

    async def get(self, key: str) -> str | None:
        try:
            return await self._redis.get(key)
        except redis.RedisError as exc:
            raise StorageFault(f"Redis GET {key!r} failed: {exc}") from exc

    async def set(self, key: str, value: str) -> None:
        try:
            await self._redis.set(key, value)
        except redis.RedisError as exc:
            raise StorageFault(f"Redis SET {key!r} failed: {exc}") from exc

    async def close(self) -> None:
        await self._redis.aclose()


def build_store(settings: LookupSettings) -> KeyValueStore:
    """Pick redis, then a cache directory, then memory."""
    if settings.redis_url:
        return RedisKeyValueStore(settings.redis_url)
    if settings.cache_dir is not None:
        return FileKeyValueStore(settings.cache_dir)
    return MemoryKeyValueStore()
