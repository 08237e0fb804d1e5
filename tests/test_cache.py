"""Tests for the in-memory TTL/LRU cache."""

import logging

import pytest

from orbitpass import InvalidInputError
from orbitpass.cache import TTLCache


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock) -> TTLCache:
    return TTLCache(capacity=3, ttl_seconds=60.0, clock=clock)


class TestConstruction:
    def test_defaults(self):
        cache = TTLCache()
        assert cache.capacity == 128
        assert cache.ttl_seconds == 300.0
        assert len(cache) == 0

    @pytest.mark.parametrize("capacity", [0, -1])
    def test_rejects_capacity(self, capacity):
        with pytest.raises(InvalidInputError, match="capacity"):
            TTLCache(capacity=capacity)

    @pytest.mark.parametrize("ttl", [0.0, -5.0, float("nan"), float("inf")])
    def test_rejects_ttl(self, ttl):
        with pytest.raises(InvalidInputError, match="ttl_seconds"):
            TTLCache(ttl_seconds=ttl)


class TestGetPut:
    def test_miss_returns_default(self, cache):
        assert cache.get("a") is None
        assert cache.get("a", 42) == 42

    def test_hit(self, cache):
        cache.put("a", 1)
        assert cache.get("a") == 1
        assert "a" in cache
        assert len(cache) == 1

    def test_overwrite(self, cache):
        cache.put("a", 1)
        cache.put("a", 2)
        assert cache.get("a") == 2
        assert len(cache) == 1

    def test_tuple_keys(self, cache):
        key = ("25544", 51.5, -0.1)
        cache.put(key, ["pass"])
        assert cache.get(key) == ["pass"]


class TestExpiry:
    def test_live_before_ttl(self, cache, clock):
        cache.put("a", 1)
        clock.advance(59.9)
        assert cache.get("a") == 1

    def test_expired_at_ttl(self, cache, clock):
        cache.put("a", 1)
        clock.advance(60.0)
        assert "a" not in cache
        assert cache.get("a") is None
        assert len(cache) == 0

    def test_expired_entry_still_counted_until_read(self, cache, clock):
        cache.put("a", 1)
        clock.advance(120.0)
        assert len(cache) == 1
        cache.get("a")
        assert len(cache) == 0

    def test_put_refreshes_timestamp(self, cache, clock):
        cache.put("a", 1)
        clock.advance(50.0)
        cache.put("a", 2)
        clock.advance(50.0)
        assert cache.get("a") == 2


class TestEviction:
    def test_evicts_least_recently_used(self, cache):
        cache.put("a", 1)
        cache.put("b", 2)
        cache.put("c", 3)
        cache.put("d", 4)
        assert "a" not in cache
        assert cache.get("d") == 4
        assert len(cache) == 3

    def test_get_marks_recently_used(self, cache):
        cache.put("a", 1)
        cache.put("b", 2)
        cache.put("c", 3)
        cache.get("a")
        cache.put("d", 4)
        assert "a" in cache
        assert "b" not in cache

    def test_overwrite_does_not_evict(self, cache):
        cache.put("a", 1)
        cache.put("b", 2)
        cache.put("c", 3)
        cache.put("c", 30)
        assert all(key in cache for key in ("a", "b", "c"))


class TestGetOrLoad:
    def test_loads_once(self, cache):
        calls = []

        def loader():
            calls.append(None)
            return "value"

        assert cache.get_or_load("k", loader) == "value"
        assert cache.get_or_load("k", loader) == "value"
        assert len(calls) == 1

    def test_reloads_after_expiry(self, cache, clock):
        values = iter([1, 2])
        assert cache.get_or_load("k", lambda: next(values)) == 1
        clock.advance(61.0)
        assert cache.get_or_load("k", lambda: next(values)) == 2

    def test_caches_none(self, cache):
        calls = []

        def loader():
            calls.append(None)
            return None

        cache.get_or_load("k", loader)
        cache.get_or_load("k", loader)
        assert len(calls) == 1

    def test_loader_error_propagates(self, cache):
        def loader():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            cache.get_or_load("k", loader)
        assert "k" not in cache


class TestInvalidation:
    def test_invalidate(self, cache):
        cache.put("a", 1)
        assert cache.invalidate("a") is True
        assert cache.invalidate("a") is False
        assert "a" not in cache

    def test_clear(self, cache):
        cache.put("a", 1)
        cache.put("b", 2)
        cache.clear()
        assert len(cache) == 0


class TestLogging:
    def test_debug_messages(self, cache, clock, caplog):
        with caplog.at_level(logging.DEBUG, logger="orbitpass.cache"):
            cache.get("a")
            cache.put("a", 1)
            cache.get("a")
            clock.advance(100.0)
            cache.get("a")

        assert "Cache miss for 'a'" in caplog.text
        assert "Cache hit for 'a'" in caplog.text
        assert "Cache entry for 'a' expired" in caplog.text

    def test_eviction_logged(self, cache, caplog):
        with caplog.at_level(logging.DEBUG, logger="orbitpass.cache"):
            for key in "abcd":
                cache.put(key, key)
        assert "evicted 'a'" in caplog.text
