"""
Tests for the LRU cache and the cached database lookups.
"""

import threading
import time

import pytest

from epmaquant.core.cache import LRUCache, clear_all_caches, get_cache_stats


class TestLRUCache:
    def test_set_and_get(self):
        cache = LRUCache(max_size=4)
        cache.set("a", 1)
        assert cache.get("a") == 1
        assert cache.get("missing") is None
        assert cache.get("missing", default=0) == 0

    def test_eviction_order(self):
        """The least recently used entry is evicted first."""
        cache = LRUCache(max_size=2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.get("a")
        cache.set("c", 3)
        assert cache.get("a") == 1
        assert cache.get("b") is None
        assert cache.get("c") == 3

    def test_ttl_expiry(self):
        cache = LRUCache(max_size=4, ttl_seconds=0.01)
        cache.set("a", 1)
        time.sleep(0.05)
        assert cache.get("a") is None

    def test_stats(self):
        cache = LRUCache(max_size=4)
        cache.set("a", 1)
        cache.get("a")
        cache.get("b")
        stats = cache.stats()
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["hit_rate"] == pytest.approx(0.5)
        assert stats["size"] == 1

    def test_clear(self):
        cache = LRUCache()
        cache.set("a", 1)
        cache.clear()
        assert cache.stats()["size"] == 0
        assert cache.stats()["hits"] == 0

    def test_make_key_ignores_kwarg_order(self):
        assert LRUCache.make_key(1, x=1, y=2) == LRUCache.make_key(1, y=2, x=1)

    def test_concurrent_access(self):
        cache = LRUCache(max_size=64)

        def worker(offset):
            for i in range(200):
                cache.set((offset, i % 32), i)
                cache.get((offset, (i + 1) % 32))

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert cache.stats()["size"] <= 64


class TestDatabaseCaches:
    def test_mac_lookups_are_cached(self, db):
        clear_all_caches()
        first = db.mac("Fe", 6403.8)
        second = db.mac("Fe", 6403.8)
        assert first == second
        assert get_cache_stats()["mac"]["hits"] >= 1

    def test_stats_keys(self):
        assert set(get_cache_stats()) == {"mac", "edges", "lines"}
