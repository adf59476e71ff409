"""Tests for the TTL cache, its key helpers and presets."""

from adjusterhub.engines.ttl_cache import CachePresets, TTLCache, cache_headers, cache_key, memoize


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def _cache(default_ttl: float = 60):
    clock = FakeClock()
    return TTLCache(default_ttl=default_ttl, clock=clock), clock


class TestExpiry:
    def test_get_within_ttl(self):
        cache, clock = _cache()
        cache.set("a", 1)
        clock.now = 60
        assert cache.get("a") == 1

    def test_expired_entry_is_dropped_on_read(self):
        cache, clock = _cache()
        cache.set("a", 1, ttl=10)
        clock.now = 10.5
        assert cache.get("a") is None
        assert cache.size() == 0

    def test_purge_expired(self):
        cache, clock = _cache()
        cache.set("short", 1, ttl=5)
        cache.set("long", 2, ttl=50)
        clock.now = 6
        assert cache.purge_expired() == 1
        assert cache.keys() == ["long"]

    def test_contains_respects_expiry(self):
        cache, clock = _cache()
        cache.set("a", None, ttl=5)
        assert "a" in cache
        clock.now = 6
        assert "a" not in cache


class TestInvalidation:
    def test_invalidate_by_tag(self):
        cache, _ = _cache()
        cache.set("dashboard:1", {}, tags=("user:1", "analytics"))
        cache.set("dashboard:2", {}, tags=("user:2", "analytics"))
        cache.set("firms:page1", {}, tags=("firms",))

        assert cache.invalidate_by_tag("user:1") == 1
        assert cache.invalidate_by_tag("analytics") == 1
        assert cache.keys() == ["firms:page1"]

    def test_invalidate_pattern(self):
        cache, _ = _cache()
        cache.set("firms:1", 1)
        cache.set("firms:2", 2)
        cache.set("claims:1", 3)
        assert cache.invalidate_pattern(r"^firms:") == 2
        assert cache.keys() == ["claims:1"]

    def test_clear_resets_stats(self):
        cache, _ = _cache()
        cache.set("a", 1)
        cache.get("a")
        cache.get("missing")
        cache.clear()
        assert cache.stats() == {"size": 0, "keys": [], "hits": 0, "misses": 0, "hitRate": 0.0}


class TestGetOrSet:
    def test_fetcher_runs_once(self):
        cache, _ = _cache()
        calls = []

        def fetch():
            calls.append(1)
            return {"total": 3}

        assert cache.get_or_set("k", fetch) == {"total": 3}
        assert cache.get_or_set("k", fetch) == {"total": 3}
        assert len(calls) == 1

    def test_none_results_are_cached(self):
        cache, _ = _cache()
        calls = []
        cache.get_or_set("k", lambda: calls.append(1))
        cache.get_or_set("k", lambda: calls.append(1))
        assert len(calls) == 1

    def test_presets_spread_as_kwargs(self):
        cache, clock = _cache()
        cache.get_or_set("firms", lambda: [], **CachePresets.FIRMS)
        assert cache.invalidate_by_tag("firms") == 1

        cache.get_or_set("me", lambda: 1, **CachePresets.user(7, ttl=30))
        clock.now = 31
        assert cache.get("me") is None

    def test_hit_rate(self):
        cache, _ = _cache()
        cache.set("a", 1)
        cache.get("a")
        cache.get("a")
        cache.get("b")
        stats = cache.stats()
        assert stats["hits"] == 2
        assert stats["misses"] == 1
        assert stats["hitRate"] == 0.6667


class TestHelpers:
    def test_cache_key_skips_none(self):
        assert cache_key("firms", None, "state=TX", 1) == "firms:state=TX:1"

    def test_memoize(self):
        cache, _ = _cache()
        calls = []

        @memoize(cache, ttl=30, key_prefix="square")
        def square(x):
            calls.append(x)
            return x * x

        assert square(3) == 9
        assert square(3) == 9
        assert square(4) == 16
        assert calls == [3, 4]

    def test_cache_headers(self):
        assert cache_headers(0) == {"Cache-Control": "no-store, must-revalidate"}
        headers = cache_headers(60, etag="abc", private=True)
        assert headers["Cache-Control"] == "private, max-age=60, stale-while-revalidate=120"
        assert headers["ETag"] == '"abc"'
