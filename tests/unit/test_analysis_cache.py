"""
Unit tests for AnalysisCache.

Time is controlled through the FakeClock fixture from conftest.
"""

from concurrent.futures import ThreadPoolExecutor

from analysis_cache import DEFAULT_TTL_SECONDS, AnalysisCache


class TestAnalysisCache:
    """Tests for get/set/has/keys/stats/flush_all/get_ttl"""

    def test_round_trip(self, cache):
        value = {"summary": "ok"}
        cache.set("k", value)
        assert cache.get("k") == value

    def test_missing_key(self, cache):
        assert cache.get("absent") is None

    def test_expires_after_default_ttl(self, cache, clock):
        cache.set("k", {"v": 1})
        clock.advance(DEFAULT_TTL_SECONDS - 1)
        assert cache.get("k") == {"v": 1}
        clock.advance(1)
        assert cache.get("k") is None
        assert cache.has("k") is False

    def test_custom_ttl(self, cache, clock):
        cache.set("short", 1, ttl=10)
        clock.advance(11)
        assert cache.get("short") is None

    def test_instance_ttl(self, clock):
        cache = AnalysisCache(ttl_seconds=5, clock=clock)
        cache.set("k", 1)
        assert cache.get_ttl("k") == clock.now + 5

    def test_get_ttl(self, cache, clock):
        cache.set("k", 1)
        assert cache.get_ttl("k") == clock.now + DEFAULT_TTL_SECONDS
        assert cache.get_ttl("absent") is None

    def test_stats_count_hits_and_misses(self, cache):
        cache.set("k", 1)
        cache.get("k")
        cache.get("k")
        cache.get("nope")
        assert cache.stats() == {"keys": 1, "hits": 2, "misses": 1}

    def test_has_does_not_touch_counters(self, cache):
        cache.set("k", 1)
        assert cache.has("k") is True
        assert cache.stats()["hits"] == 0

    def test_keys_skip_expired(self, cache, clock):
        cache.set("old", 1, ttl=5)
        cache.set("new", 2)
        clock.advance(6)
        assert cache.keys() == ["new"]
        assert cache.stats()["keys"] == 1

    def test_overwrite_resets_expiry(self, cache, clock):
        cache.set("k", 1)
        clock.advance(DEFAULT_TTL_SECONDS - 10)
        cache.set("k", 2)
        clock.advance(20)
        assert cache.get("k") == 2

    def test_writes_drop_expired_entries(self, cache, clock):
        for i in range(1000):
            cache.set(f"page-{i}", {"i": i}, ttl=1)
            clock.advance(2)
        assert len(cache._entries) == 1

    def test_stored_value_is_a_copy(self, cache):
        value = {"metrics": {"wordCount": 10}, "keyPoints": ["a"]}
        cache.set("k", value)
        value["metrics"]["wordCount"] = -1
        value["keyPoints"].append("b")
        assert cache.get("k") == {"metrics": {"wordCount": 10}, "keyPoints": ["a"]}

    def test_returned_value_is_a_copy(self, cache):
        cache.set("k", {"metrics": {"wordCount": 10}, "keyPoints": ["a"]})
        first = cache.get("k")
        first["metrics"]["wordCount"] = -1
        first["keyPoints"].append("b")
        assert cache.get("k") == {"metrics": {"wordCount": 10}, "keyPoints": ["a"]}

    def test_flush_all(self, cache):
        cache.set("a", 1)
        cache.set("b", 2)
        cache.get("a")
        assert cache.flush_all() == 2
        assert cache.keys() == []
        # Counters are monotonic and survive a flush.
        assert cache.stats() == {"keys": 0, "hits": 1, "misses": 0}

    def test_isolated_instances(self, clock):
        first = AnalysisCache(clock=clock)
        second = AnalysisCache(clock=clock)
        first.set("k", 1)
        assert second.get("k") is None

    def test_concurrent_writers(self):
        cache = AnalysisCache()

        def write(i):
            cache.set(f"key-{i % 10}", {"value": i})
            return cache.get(f"key-{i % 10}")

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(write, range(200)))

        assert all(isinstance(r, dict) and "value" in r for r in results)
        assert len(cache.keys()) == 10
