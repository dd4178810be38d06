"""
YApi MCP — Cache Store Tests

Tests TTL expiry, FIFO capacity eviction, disabled mode and stats.
Time is driven by an injected clock.
"""

import threading

import pytest

from yapi_mcp.cache.store import CacheEntry, CacheStore
from yapi_mcp.config import CacheConfig


def make_store(clock, ttl: float = 300, max_size: int = 100, enabled: bool = True) -> CacheStore:
    return CacheStore(CacheConfig(ttl_seconds=ttl, max_size=max_size, enabled=enabled), clock=clock)


class TestCacheConfigDefaults:
    def test_defaults(self) -> None:
        """Five minute TTL, 100 entries, enabled."""
        config = CacheConfig()
        assert config.ttl_seconds == 300
        assert config.max_size == 100
        assert config.enabled is True

    def test_config_is_immutable(self) -> None:
        config = CacheConfig()
        with pytest.raises(Exception):
            config.max_size = 5  # type: ignore[misc]

    def test_ttl_must_be_positive(self) -> None:
        with pytest.raises(Exception):
            CacheConfig(ttl_seconds=0)


class TestGetSet:
    def test_set_then_get_returns_value(self, clock) -> None:
        store = make_store(clock)
        store.set("k", {"nested": [1, 2, 3]})
        assert store.get("k") == {"nested": [1, 2, 3]}

    def test_get_missing_key_is_miss(self, clock) -> None:
        store = make_store(clock)
        assert store.get("nope") is None

    def test_set_replaces_and_resets_timestamps(self, clock) -> None:
        store = make_store(clock, ttl=10)
        store.set("k", 1)
        clock.advance(8)
        store.set("k", 2)
        clock.advance(8)
        # 16s after the first write but only 8s after the replacement
        assert store.get("k") == 2
        assert len(store) == 1

    def test_entry_timestamps(self, clock) -> None:
        clock.advance(5)
        store = make_store(clock, ttl=10)
        store.set("k", "v")
        entry = store._entries["k"]
        assert entry == CacheEntry(value="v", created_at=5, expire_at=15)

    def test_stored_none_is_distinguishable_from_miss(self, clock) -> None:
        store = make_store(clock)
        missing = object()
        store.set("k", None)

        assert store.get("k", missing) is None
        assert store.get("absent", missing) is missing
        stats = store.stats()
        assert stats.hits == 1
        assert stats.misses == 1

    @pytest.mark.parametrize("value", [0, "", [], False])
    def test_falsy_values_are_hits(self, clock, value) -> None:
        store = make_store(clock)
        store.set("k", value)
        assert store.get("k", object()) == value
        assert store.stats().hits == 1

    def test_miss_returns_default(self, clock) -> None:
        store = make_store(clock, ttl=1)
        store.set("k", 1)
        clock.advance(1)
        assert store.get("k", "fallback") == "fallback"


class TestExpiry:
    def test_hit_before_ttl_miss_at_ttl(self, clock) -> None:
        """ttl=1s: hit at 0.999s, miss at exactly 1s."""
        store = make_store(clock, ttl=1.0)
        store.set("k", 42)

        clock.now = 0.999
        assert store.get("k") == 42

        clock.now = 1.0
        assert store.get("k") is None

    def test_expired_entry_removed_on_read(self, clock) -> None:
        store = make_store(clock, ttl=1)
        store.set("k", 1)
        clock.advance(2)
        assert len(store) == 1
        assert store.get("k") is None
        assert len(store) == 0

    def test_contains_respects_expiry(self, clock) -> None:
        store = make_store(clock, ttl=1)
        store.set("k", 1)
        assert "k" in store
        clock.advance(1)
        assert "k" not in store


class TestEviction:
    def test_oldest_inserted_is_evicted(self, clock) -> None:
        """max_size=2: A at t=0, B at t=1, C at t=2 leaves {B, C}."""
        store = make_store(clock, max_size=2)
        store.set("A", 1)
        clock.advance(1)
        store.set("B", 2)
        clock.advance(1)
        store.set("C", 3)

        assert store.get("A") is None
        assert store.get("B") == 2
        assert store.get("C") == 3
        assert store.stats().keys == ["B", "C"]

    def test_reads_do_not_protect_from_eviction(self, clock) -> None:
        store = make_store(clock, max_size=3)
        for key in ("a", "b", "c"):
            store.set(key, key)
            clock.advance(1)

        # Frequent reads of "a" must not change FIFO order
        for _ in range(5):
            assert store.get("a") == "a"

        store.set("d", "d")
        assert store.get("a") is None
        assert sorted(store.stats().keys) == ["b", "c", "d"]

    def test_size_never_exceeds_max(self, clock) -> None:
        store = make_store(clock, max_size=5)
        for i in range(50):
            store.set(f"key{i}", i)
            assert len(store) <= 5
        assert store.stats().keys == [f"key{i}" for i in range(45, 50)]
        assert store.stats().evictions == 45

    def test_replacing_existing_key_at_capacity_evicts_oldest(self, clock) -> None:
        """max_size=2: A at t=0, B at t=1, B again at t=2 leaves only B."""
        store = make_store(clock, max_size=2)
        store.set("A", 1)
        clock.advance(1)
        store.set("B", 2)
        clock.advance(1)
        store.set("B", 20)

        assert store.get("A") is None
        assert store.get("B") == 20
        assert len(store) == 1
        assert store.stats().evictions == 1

    def test_replacing_oldest_key_at_capacity(self, clock) -> None:
        store = make_store(clock, max_size=2)
        store.set("A", 1)
        clock.advance(1)
        store.set("B", 2)
        clock.advance(1)
        store.set("A", 10)

        # A was the oldest, so it is the entry evicted and then re-inserted
        assert store.stats().keys == ["B", "A"]
        assert store.get("A") == 10
        assert store.get("B") == 2
        assert len(store) <= 2

    def test_max_size_zero_stores_nothing(self, clock) -> None:
        store = make_store(clock, max_size=0)
        store.set("x", 1)
        assert store.get("x") is None
        assert store.stats().size == 0


class TestDisabled:
    def test_disabled_store_is_pass_through(self, clock) -> None:
        store = make_store(clock, enabled=False)
        store.set("x", 1)
        assert store.get("x") is None
        stats = store.stats()
        assert stats.size == 0
        assert stats.enabled is False


class TestDeleteClear:
    def test_delete(self, clock) -> None:
        store = make_store(clock)
        store.set("k", 1)
        assert store.delete("k") is True
        assert store.get("k") is None
        assert store.delete("k") is False

    def test_clear(self, clock) -> None:
        store = make_store(clock)
        for i in range(5):
            store.set(f"key{i}", i)
        store.clear()
        for i in range(5):
            assert store.get(f"key{i}") is None
        assert store.stats().size == 0


class TestStats:
    def test_stats_sweeps_expired_entries(self, clock) -> None:
        store = make_store(clock, ttl=10, max_size=50)
        store.set("old", 1)
        clock.advance(6)
        store.set("new", 2)
        clock.advance(5)

        stats = store.stats()
        assert stats.size == 1
        assert stats.keys == ["new"]
        assert stats.max_size == 50
        assert stats.ttl_seconds == 10
        assert stats.enabled is True

    def test_hit_and_miss_counters(self, clock) -> None:
        store = make_store(clock)
        store.set("k", 1)
        store.get("k")
        store.get("k")
        store.get("missing")

        stats = store.stats()
        assert stats.hits == 2
        assert stats.misses == 1
        assert stats.hit_rate == pytest.approx(66.67)
        assert stats.to_dict()["hit_rate"] == pytest.approx(66.67)


class TestThreadSafety:
    def test_concurrent_sets_respect_capacity(self) -> None:
        store = CacheStore(CacheConfig(max_size=20))

        def writer(prefix: str) -> None:
            for i in range(200):
                store.set(f"{prefix}-{i}", i)

        threads = [threading.Thread(target=writer, args=(f"t{n}",)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(store) == 20
