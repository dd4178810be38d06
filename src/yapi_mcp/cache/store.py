"""
YApi MCP — In-Memory Cache Store

Key/value store with per-entry TTL and a capacity bound.

Eviction is insertion-ordered (FIFO): when the store is full, the entry
created earliest is dropped, no matter how recently it was read. Reads do
not reorder entries, so eviction is a single pop from the front of the map.

All operations are synchronous and guarded by one lock, so the store can be
shared by concurrent coroutines and threads alike.
"""

import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from typing import Any, Generic, TypeVar

from ..config import CacheConfig

logger = logging.getLogger(__name__)

V = TypeVar("V")


@dataclass(frozen=True)
class CacheEntry(Generic[V]):
    """A stored value with its creation and absolute expiry timestamps."""

    value: V
    created_at: float
    expire_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expire_at


@dataclass
class CacheStats:
    """Snapshot of the store. Only live entries are counted."""

    size: int
    max_size: int
    ttl_seconds: float
    enabled: bool
    keys: list[str] = field(default_factory=list)
    hits: int = 0
    misses: int = 0
    evictions: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return round(self.hits / total * 100, 2) if total else 0.0

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["hit_rate"] = self.hit_rate
        return data


class CacheStore(Generic[V]):
    """
    In-memory cache with TTL expiry and FIFO capacity eviction.

    Features:
    - Lazy expiry on read, full sweep on stats()
    - Oldest-inserted entry evicted when max_size is reached
    - enabled=False or max_size=0 turns the store into a pass-through
    - Injectable clock for deterministic tests
    """

    def __init__(
        self,
        config: CacheConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the cache store.

        Args:
            config: Cache configuration (defaults: 5 minute TTL, 100 entries, enabled)
            clock: Monotonic time source in seconds
        """
        self.config = config or CacheConfig()
        self._clock = clock

        # Insertion order == creation order; the first item is always the oldest
        self._entries: OrderedDict[str, CacheEntry[V]] = OrderedDict()
        self._lock = threading.Lock()

        self._hits = 0
        self._misses = 0
        self._evictions = 0

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    @property
    def max_size(self) -> int:
        return self.config.max_size

    @property
    def ttl_seconds(self) -> float:
        return self.config.ttl_seconds

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and not entry.is_expired(self._clock())

    def get(self, key: str, default: Any = None) -> Any:
        """
        Return the cached value for ``key``, or ``default`` on a miss.

        A miss is reported when caching is disabled, the key is absent, or the
        entry has expired. Expired entries found here are removed. Pass a
        sentinel as ``default`` to tell a stored None apart from a miss.
        """
        if not self.enabled:
            return default

        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return default

            if entry.is_expired(self._clock()):
                del self._entries[key]
                self._misses += 1
                logger.debug("Expired cache entry removed on read: %s", key)
                return default

            self._hits += 1
            return entry.value

    def set(self, key: str, value: V) -> None:
        """
        Store ``value`` under ``key``, resetting its timestamps.

        When the store is full, the oldest-inserted entry is evicted first,
        even if ``key`` is already present.
        """
        if not self.enabled or self.max_size == 0:
            return

        with self._lock:
            now = self._clock()

            if len(self._entries) >= self.max_size:
                evicted_key, _ = self._entries.popitem(last=False)
                self._evictions += 1
                logger.debug("Evicted oldest cache entry: %s", evicted_key)

            # Replacement gets a new entry at the back of the queue
            self._entries.pop(key, None)

            self._entries[key] = CacheEntry(value=value, created_at=now, expire_at=now + self.ttl_seconds)

    def delete(self, key: str) -> bool:
        """Remove ``key``. Returns True if an entry was removed."""
        with self._lock:
            if key in self._entries:
                del self._entries[key]
                return True
            return False

    def clear(self) -> None:
        """Remove every entry."""
        with self._lock:
            size = len(self._entries)
            self._entries.clear()
        logger.info("Cleared %d entries from cache", size)

    def _sweep_expired(self, now: float) -> int:
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def stats(self) -> CacheStats:
        """Sweep expired entries, then report live size and keys."""
        with self._lock:
            removed = self._sweep_expired(self._clock())
            if removed:
                logger.debug("Swept %d expired cache entries", removed)

            return CacheStats(
                size=len(self._entries),
                max_size=self.max_size,
                ttl_seconds=self.ttl_seconds,
                enabled=self.enabled,
                keys=list(self._entries.keys()),
                hits=self._hits,
                misses=self._misses,
                evictions=self._evictions,
            )
