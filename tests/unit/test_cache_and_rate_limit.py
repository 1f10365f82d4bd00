"""
Unit tests for the in-memory response cache and the fixed-window rate limiter.

This module tests:
- song_api/services/cache_service.py
- song_api/services/rate_limit_service.py
"""

from song_api.services.cache_service import ResponseCache
from song_api.services.rate_limit_service import FixedWindowRateLimiter


class TestResponseCache:
    """Test ResponseCache TTL and capacity behaviour."""

    def test_put_then_get(self, clock):
        cache = ResponseCache(max_entries=10, default_ttl=60, timer=clock)
        cache.put("/song/dQw4w9WgXcQ", {"id": "dQw4w9WgXcQ"})
        assert cache.get("/song/dQw4w9WgXcQ") == {"id": "dQw4w9WgXcQ"}

    def test_missing_key(self, clock):
        cache = ResponseCache(timer=clock)
        assert cache.get("/song/unknown") is None

    def test_entry_expires_after_ttl(self, clock):
        cache = ResponseCache(max_entries=10, default_ttl=60, timer=clock)
        cache.put("key", "value")
        clock.advance(59)
        assert cache.get("key") == "value"
        clock.advance(1)
        assert cache.get("key") is None

    def test_per_entry_ttl(self, clock):
        cache = ResponseCache(max_entries=10, default_ttl=60, timer=clock)
        cache.put("short", 1, ttl=5)
        cache.put("long", 2)
        clock.advance(10)
        assert cache.get("short") is None
        assert cache.get("long") == 2

    def test_put_overwrites(self, clock):
        cache = ResponseCache(timer=clock)
        cache.put("key", "old")
        cache.put("key", "new")
        assert cache.get("key") == "new"

    def test_put_after_expiry_overwrites(self, clock):
        cache = ResponseCache(default_ttl=10, timer=clock)
        cache.put("key", "old")
        clock.advance(20)
        assert cache.get("key") is None
        cache.put("key", "new")
        assert cache.get("key") == "new"

    def test_non_positive_ttl_is_not_stored(self, clock):
        cache = ResponseCache(timer=clock)
        cache.put("key", "value", ttl=0)
        assert cache.get("key") is None

    def test_capacity_evicts_least_recently_used(self, clock):
        cache = ResponseCache(max_entries=2, default_ttl=60, timer=clock)
        cache.put("a", 1)
        cache.put("b", 2)
        cache.get("a")
        cache.put("c", 3)
        assert cache.get("a") == 1
        assert cache.get("b") is None
        assert cache.get("c") == 3

    def test_stats_and_clear(self, clock):
        cache = ResponseCache(max_entries=5, default_ttl=60, timer=clock)
        cache.put("a", 1)
        cache.get("a")
        cache.get("missing")
        assert cache.stats() == {"entries": 1, "maxEntries": 5, "hits": 1, "misses": 1}
        assert cache.clear() == 1
        assert len(cache) == 0


class TestFixedWindowRateLimiter:
    """Test fixed-window admission."""

    def test_exactly_n_admissions(self, clock):
        limiter = FixedWindowRateLimiter(max_requests=3, window_seconds=900, timer=clock)
        results = [limiter.admit("1.2.3.4").allowed for _ in range(4)]
        assert results == [True, True, True, False]

    def test_remaining_counts_down(self, clock):
        limiter = FixedWindowRateLimiter(max_requests=3, window_seconds=900, timer=clock)
        assert [limiter.admit("c").remaining for _ in range(4)] == [2, 1, 0, 0]

    def test_window_reset_admits_again(self, clock):
        limiter = FixedWindowRateLimiter(max_requests=2, window_seconds=900, timer=clock)
        limiter.admit("c")
        limiter.admit("c")
        assert not limiter.admit("c").allowed
        clock.advance(899)
        assert not limiter.admit("c").allowed
        clock.advance(1)
        decision = limiter.admit("c")
        assert decision.allowed
        assert decision.remaining == 1

    def test_window_is_fixed_not_sliding(self, clock):
        limiter = FixedWindowRateLimiter(max_requests=2, window_seconds=100, timer=clock)
        limiter.admit("c")
        clock.advance(99)
        limiter.admit("c")
        clock.advance(1)
        # New window: both slots free again even though a request came 1s ago
        assert limiter.admit("c").allowed
        assert limiter.admit("c").allowed
        assert not limiter.admit("c").allowed

    def test_clients_are_independent(self, clock):
        limiter = FixedWindowRateLimiter(max_requests=1, window_seconds=900, timer=clock)
        assert limiter.admit("a").allowed
        assert not limiter.admit("a").allowed
        assert limiter.admit("b").allowed

    def test_reset_after_and_headers(self, clock):
        limiter = FixedWindowRateLimiter(max_requests=1, window_seconds=900, timer=clock)
        limiter.admit("c")
        clock.advance(100.5)
        decision = limiter.admit("c")
        assert not decision.allowed
        assert decision.reset_after == 800
        assert decision.headers() == {
            "RateLimit-Limit": "1",
            "RateLimit-Remaining": "0",
            "RateLimit-Reset": "800",
        }

    def test_expired_windows_are_swept(self, clock):
        limiter = FixedWindowRateLimiter(max_requests=5, window_seconds=60, timer=clock)
        for client in ("a", "b", "c"):
            limiter.admit(client)
        assert limiter.tracked_clients() == 3
        clock.advance(61)
        limiter.admit("d")
        assert limiter.tracked_clients() == 1

    def test_reset(self, clock):
        limiter = FixedWindowRateLimiter(max_requests=1, window_seconds=900, timer=clock)
        limiter.admit("a")
        limiter.reset("a")
        assert limiter.admit("a").allowed
        limiter.reset()
        assert limiter.tracked_clients() == 0
