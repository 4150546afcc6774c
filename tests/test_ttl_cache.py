"""
Tests for the in-process TTL caches.
"""

from carsearch.cache.ttl_cache import SearchCaches, TTLCache


class TestTTLCache:
    def test_set_and_get(self, clock):
        cache = TTLCache(60, clock=clock)
        cache.set("k", "v")
        assert cache.get("k") == "v"
        assert "k" in cache
        assert len(cache) == 1

    def test_entry_expires_after_ttl(self, clock):
        cache = TTLCache(60, clock=clock)
        cache.set("k", "v")
        clock.advance(60)
        assert cache.get("k") == "v"
        clock.advance(1)
        assert cache.get("k") is None
        assert len(cache) == 0

    def test_missing_key(self, clock):
        assert TTLCache(60, clock=clock).get("nope") is None

    def test_get_or_compute_computes_once(self, clock):
        cache = TTLCache(60, clock=clock)
        calls = []

        def compute():
            calls.append(1)
            return "value"

        assert cache.get_or_compute("k", compute) == "value"
        assert cache.get_or_compute("k", compute) == "value"
        assert len(calls) == 1

    def test_clear_reports_count(self, clock):
        cache = TTLCache(60, clock=clock)
        cache.set("a", 1)
        cache.set("b", 2)
        assert cache.clear() == 2
        assert cache.get("a") is None


class TestSearchCaches:
    def test_ttls_come_from_config(self, config, clock):
        caches = SearchCaches(config, clock=clock)
        assert caches.results.ttl == config.pipeline_cache_ttl
        assert caches.responses.ttl == config.response_cache_ttl

    def test_clear_empties_both(self, caches):
        caches.results.set("q", object())
        caches.responses.set("r", "text")
        assert caches.clear() == {"results": 1, "responses": 1}
        assert len(caches.results) == 0
        assert len(caches.responses) == 0
