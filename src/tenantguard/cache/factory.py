"""Cache store factory for tenantguard."""

from __future__ import annotations

from tenantguard.cache.base import CacheStore
from tenantguard.cache.memory import MemoryCacheStore
from tenantguard.cache.redis import RedisCacheStore
from tenantguard.config import Settings, settings

_store: CacheStore | None = None


def create_cache_store(config: Settings) -> CacheStore:
    """Build a CacheStore for the configured backend."""
    backend = config.cache_backend.lower()
    if backend == "memory":
        return MemoryCacheStore(max_entries=config.cache_max_entries or None)
    if backend == "redis":
        return RedisCacheStore.from_url(config.redis_url)
    raise ValueError("Unsupported cache_backend. Supported values: memory, redis.")


def get_cache_store() -> CacheStore:
    """Return a singleton CacheStore based on settings."""
    global _store
    if _store is None:
        _store = create_cache_store(settings)
    return _store


async def close_cache_store() -> None:
    """Close the singleton store, if one was created."""
    global _store
    if _store is not None:
        await _store.close()
        _store = None
