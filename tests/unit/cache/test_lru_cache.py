"""Test bounded TTL cache tier."""

import threading

import pytest

from voicegate.cache.lru_cache import EvictionPolicy, LRUCache
from voicegate.exceptions import ConfigurationError


@pytest.fixture
def cache(clock):
    """Three-entry insertion-ordered cache with 10s TTL."""
    return LRUCache("test", capacity=3, ttl_seconds=10, clock=clock)


class TestConstruction:
    """Test cache construction."""

    def test_should_reject_zero_capacity(self):
        """Test capacity validation."""
        with pytest.raises(ConfigurationError):
            LRUCache("bad", capacity=0, ttl_seconds=10)

    def test_should_reject_non_positive_ttl(self):
        """Test TTL validation."""
        with pytest.raises(ConfigurationError):
            LRUCache("bad", capacity=1, ttl_seconds=0)

    def test_should_accept_policy_by_name(self):
        """Test policy given as string."""
        cache = LRUCache("c", capacity=1, ttl_seconds=1, eviction_policy="recency")
        assert cache.eviction_policy is EvictionPolicy.RECENCY


class TestGetSet:
    """Test basic lookups."""

    def test_should_return_stored_value(self, cache):
        """Test roundtrip within TTL."""
        cache.set("a", 1)
        assert cache.get("a") == 1

    def test_should_return_none_for_missing_key(self, cache):
        """Test miss."""
        assert cache.get("missing") is None

    def test_should_overwrite_without_growing(self, cache):
        """Test idempotent overwrite."""
        cache.set("a", 1)
        cache.set("a", 2)
        assert cache.get("a") == 2
        assert len(cache) == 1

    def test_should_count_hits_and_misses(self, cache):
        """Test statistics counters."""
        cache.set("a", 1)
        cache.get("a")
        cache.get("b")
        stats = cache.stats()
        assert stats.hits == 1
        assert stats.misses == 1
        assert stats.hit_rate == 0.5


class TestExpiry:
    """Test TTL behaviour."""

    def test_should_miss_after_ttl(self, cache, clock):
        """Test entry expires at now >= expires_at."""
        cache.set("a", 1)
        clock.advance(9)
        assert cache.get("a") == 1
        clock.advance(1)
        assert cache.get("a") is None

    def test_expired_entry_stays_resident_until_purge(self, cache, clock):
        """Test lazy expiry."""
        cache.set("a", 1)
        clock.advance(11)
        assert cache.get("a") is None
        assert len(cache) == 1
        assert "a" not in cache

        assert cache.purge_expired() == 1
        assert len(cache) == 0
        assert cache.stats().expirations == 1

    def test_overwrite_refreshes_expiry(self, cache, clock):
        """Test set resets TTL."""
        cache.set("a", 1)
        clock.advance(8)
        cache.set("a", 2)
        clock.advance(8)
        assert cache.get("a") == 2

    def test_purge_keeps_live_entries(self, cache, clock):
        """Test purge only removes expired entries."""
        cache.set("old", 1)
        clock.advance(6)
        cache.set("new", 2)
        clock.advance(5)
        assert cache.purge_expired() == 1
        assert cache.get("new") == 2


class TestEviction:
    """Test overflow eviction."""

    def test_should_never_exceed_capacity(self, cache):
        """Test capacity invariant."""
        for i in range(10):
            cache.set(f"k{i}", i)
            assert len(cache) <= 3

    def test_insertion_policy_evicts_oldest_inserted(self, cache):
        """Test FIFO order ignores reads."""
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("c", 3)
        cache.get("a")
        cache.set("d", 4)

        assert cache.get("a") is None
        assert cache.get("b") == 2
        assert cache.stats().evictions == 1

    def test_recency_policy_evicts_least_recently_used(self, clock):
        """Test reads protect entries under recency policy."""
        cache = LRUCache(
            "lru", 3, 10, eviction_policy=EvictionPolicy.RECENCY, clock=clock
        )
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("c", 3)
        cache.get("a")
        cache.set("d", 4)

        assert cache.get("a") == 1
        assert cache.get("b") is None

    def test_overwrite_moves_key_to_back(self, cache):
        """Test overwritten key is evicted last."""
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("c", 3)
        cache.set("a", 10)
        cache.set("d", 4)

        assert cache.get("a") == 10
        assert cache.get("b") is None


class TestPrune:
    """Test memory-pressure pruning."""

    def test_should_skip_when_below_threshold(self, clock):
        """Test prune is a no-op below 90% fill."""
        cache = LRUCache("p", 100, 60, clock=clock)
        for i in range(89):
            cache.set(i, i)
        assert cache.prune() == 0
        assert len(cache) == 89

    def test_should_drop_quarter_when_nearly_full(self, clock):
        """Test 95 of 100 entries prunes down to 72."""
        cache = LRUCache("p", 100, 60, clock=clock)
        for i in range(95):
            cache.set(i, i)

        removed = cache.prune()

        assert removed == 23
        assert len(cache) == 72
        assert cache.get(0) is None
        assert cache.get(22) is None
        assert cache.get(23) == 23


class TestMaintenance:
    """Test clear and snapshots."""

    def test_clear_returns_count(self, cache):
        """Test clear."""
        cache.set("a", 1)
        cache.set("b", 2)
        assert cache.clear() == 2
        assert len(cache) == 0

    def test_delete(self, cache):
        """Test delete."""
        cache.set("a", 1)
        assert cache.delete("a") is True
        assert cache.delete("a") is False


class TestConcurrency:
    """Test thread safety."""

    def test_concurrent_writers_respect_capacity(self):
        """Test capacity holds under concurrent sets."""
        cache = LRUCache("t", capacity=50, ttl_seconds=60)

        def writer(offset):
            for i in range(500):
                cache.set(f"{offset}-{i}", i)
                cache.get(f"{offset}-{i - 1}")

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(cache) == 50
