"""
YApi MCP — Cache Module

Short-lived in-memory caching for YApi responses.

- store.py: CacheStore with TTL expiry and FIFO capacity eviction
- keys.py: deterministic cache key generation
- fetcher.py: read-through CachedFetcher with in-flight de-duplication

Usage:
    from yapi_mcp.cache import CacheStore, CachedFetcher
    from yapi_mcp.config import CacheConfig

    store = CacheStore(CacheConfig(ttl_seconds=600, max_size=200))
    get_list = CachedFetcher(store).with_cache("getInterfaceList", client.get_interface_list)
"""

from .fetcher import CachedFetcher
from .keys import generate_key
from .store import CacheEntry, CacheStats, CacheStore

__all__ = [
    "CacheStore",
    "CacheEntry",
    "CacheStats",
    "CachedFetcher",
    "generate_key",
]
