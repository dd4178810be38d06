"""
YApi MCP — YApi Interface Catalog for MCP Clients

Exposes YApi interface lists, details and search as MCP tools, backed by a
short-lived in-memory cache with batch preloading.
"""

__version__ = "0.1.0"

from .batch import BatchItemError, BatchOrchestrator, BatchResult, PreloadSummary
from .cache import CachedFetcher, CacheStore, generate_key

__all__ = [
    "CacheStore",
    "CachedFetcher",
    "generate_key",
    "BatchOrchestrator",
    "BatchResult",
    "BatchItemError",
    "PreloadSummary",
]
