"""Cache layer for tenantguard.

Provides the store the tenant cache interceptor writes through:
- TenantCacheKey: Tenant-prefixed composite keys
- MemoryCacheStore: In-process store with absolute and sliding expiry
- RedisCacheStore: Shared store for horizontally scaled hosts
"""

from tenantguard.cache.base import CacheEntry, CacheStore
from tenantguard.cache.factory import close_cache_store, create_cache_store, get_cache_store
from tenantguard.cache.keys import TenantCacheKey
from tenantguard.cache.memory import MemoryCacheStore
from tenantguard.cache.redis import RedisCacheStore

__all__ = [
    "CacheEntry",
    "CacheStore",
    "TenantCacheKey",
    "MemoryCacheStore",
    "RedisCacheStore",
    "create_cache_store",
    "get_cache_store",
    "close_cache_store",
]
