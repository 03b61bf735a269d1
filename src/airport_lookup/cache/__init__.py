"""Catalog, recents and session caches."""

from .manager import CacheManager
from .session import SessionResultCache
from .store import (
    FileKeyValueStore,
    KeyValueStore,
    MemoryKeyValueStore,
    RedisKeyValueStore,
    build_store,
)

__all__ = [
    "CacheManager",
    "FileKeyValueStore",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "RedisKeyValueStore",
    "SessionResultCache",
    "build_store",
]
