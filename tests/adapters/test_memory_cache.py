"""Tests for the cache adapters."""

from unittest.mock import patch

from poi_search.adapters.cache import InMemoryCache, NullCache


class TestInMemoryCache:
    def test_set_and_get(self):
        cache = InMemoryCache(name="test")
        cache.set("k", 1)
        assert cache.get("k") == 1
        assert cache.get("missing") is None

    def test_entry_expires_after_ttl(self):
        cache = InMemoryCache(name="test", default_ttl_seconds=10)
        with patch("poi_search.adapters.cache.memory_cache.time.monotonic") as clock:
            clock.return_value = 100.0
            cache.set("k", "v")
            clock.return_value = 105.0
            assert cache.get("k") == "v"
            clock.return_value = 111.0
            assert cache.get("k") is None
        assert cache.size() == 0

    def test_per_entry_ttl_overrides_default(self):
        cache = InMemoryCache(name="test")
        with patch("poi_search.adapters.cache.memory_cache.time.monotonic") as clock:
            clock.return_value = 0.0
            cache.set("short", 1, ttl=1)
            cache.set("forever", 2)
            clock.return_value = 1000.0
            assert cache.get("short") is None
            assert cache.get("forever") == 2

    def test_max_size_evicts_oldest(self):
        cache = InMemoryCache(name="test", max_size=2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("c", 3)
        assert cache.get("a") is None
        assert cache.get("b") == 2
        assert cache.get("c") == 3

    def test_read_refreshes_recency(self):
        cache = InMemoryCache(name="test", max_size=2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.get("a")
        cache.set("c", 3)
        assert cache.get("a") == 1
        assert cache.get("b") is None
        assert cache.stats()["evictions"] == 1

    def test_expired_entries_purged_before_eviction(self):
        cache = InMemoryCache(name="test", max_size=2)
        with patch("poi_search.adapters.cache.memory_cache.time.monotonic") as clock:
            clock.return_value = 0.0
            cache.set("old", 1)
            cache.set("short", 2, ttl=5)
            clock.return_value = 10.0
            cache.set("new", 3)
            assert cache.get("old") == 1
            assert cache.get("new") == 3
        assert cache.stats()["evictions"] == 0

    def test_invalidate_and_clear(self):
        cache = InMemoryCache(name="test")
        cache.set("a", 1)
        cache.set("b", 2)
        assert cache.invalidate("a") is True
        assert cache.invalidate("a") is False
        assert cache.clear() == 1
        assert cache.size() == 0

    def test_stats_track_hits_and_misses(self):
        cache = InMemoryCache(name="test")
        cache.set("a", 1)
        cache.get("a")
        cache.get("b")
        stats = cache.stats()
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["hit_rate_percent"] == 50.0


def test_null_cache_never_hits():
    cache = NullCache()
    cache.set("a", 1)
    assert cache.get("a") is None
    assert cache.invalidate("a") is False
    assert cache.clear() == 0
