"""
YApi MCP — Read-Through Cache Adapter

Wraps an async fetch function so results are served from a CacheStore when
present and stored there after a successful fetch. Failures are never cached.

Concurrent misses on the same key share one in-flight fetch ("singleflight")
unless ``coalesce=False`` is given.
"""

import asyncio
import functools
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from ..observability import get_observability
from .keys import generate_key
from .store import CacheStore

logger = logging.getLogger(__name__)

R = TypeVar("R")

_MISS = object()


class CachedFetcher:
    """
    Read-through caching for async fetch operations.

    Example:
        fetcher = CachedFetcher(store)
        get_detail = fetcher.with_cache("getGroupInfo", client.get_interface_detail)
        detail = await get_detail(42)  # fetched once, then served from cache
    """

    def __init__(self, store: CacheStore[Any], coalesce: bool = True):
        """
        Args:
            store: Cache store shared by every wrapped operation
            coalesce: Share one in-flight fetch between concurrent misses on a key
        """
        self.store = store
        self.coalesce = coalesce
        self._inflight: dict[str, asyncio.Task[Any]] = {}

    def with_cache(
        self,
        operation: str,
        fetch_fn: Callable[..., Awaitable[R]],
    ) -> Callable[..., Awaitable[R]]:
        """
        Wrap ``fetch_fn`` with read-through caching.

        The returned coroutine function takes the same positional arguments
        as ``fetch_fn``; the cache key is derived from ``operation`` and them.
        """

        @functools.wraps(fetch_fn)
        async def cached(*args: Any) -> R:
            key = generate_key(operation, *args)
            return await self.fetch(key, lambda: fetch_fn(*args), operation=operation)

        return cached

    async def fetch(
        self,
        key: str,
        loader: Callable[[], Awaitable[R]],
        operation: str = "unknown",
    ) -> R:
        """
        Return the cached value for ``key`` or load, store and return it.

        Raises:
            Whatever ``loader`` raises, unchanged. Nothing is cached on failure.
        """
        obs = get_observability()

        cached = self.store.get(key, _MISS)
        if cached is not _MISS:
            obs.increment("cache.hits", tags={"operation": operation})
            logger.debug("Cache hit: %s", key)
            return cached  # type: ignore[no-any-return]

        obs.increment("cache.misses", tags={"operation": operation})
        logger.debug("Cache miss: %s", key)

        if not self.coalesce:
            return await self._load(key, loader, operation)

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._load(key, loader, operation))
            self._inflight[key] = task
            task.add_done_callback(functools.partial(self._forget, key))
        else:
            obs.increment("cache.coalesced", tags={"operation": operation})
            logger.debug("Joining in-flight fetch: %s", key)

        # A cancelled caller must not cancel the fetch other callers wait on
        return await asyncio.shield(task)  # type: ignore[no-any-return]

    async def _load(self, key: str, loader: Callable[[], Awaitable[R]], operation: str) -> R:
        try:
            result = await loader()
        except Exception as e:
            get_observability().increment("fetch.failures", tags={"operation": operation})
            logger.warning(
                f"Fetch failed for {key}: {e}",
                extra={"cache_key": key, "operation": operation, "error_type": type(e).__name__},
            )
            raise

        self.store.set(key, result)
        return result

    def _forget(self, key: str, task: "asyncio.Task[Any]") -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        # Every waiter may have been cancelled; mark the exception as retrieved
        if not task.cancelled():
            task.exception()

    @property
    def inflight_count(self) -> int:
        return len(self._inflight)
