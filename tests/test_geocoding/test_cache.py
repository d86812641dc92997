"""Tests for the in-memory geocode cache."""

import threading

import pytest

from placeresolver.core.geocoding.cache import GeocodeCache
from placeresolver.core.geocoding.models import CacheStats
from tests.fixtures.geocoding import make_geocode_result


class TestGeocodeCache:
    """Unit tests for GeocodeCache."""

    @pytest.fixture
    def cache(self, fake_clock):
        """Cache with a one-hour expiry and room for five entries."""
        return GeocodeCache(cache_expiry=3600, max_cache_size=5, clock=fake_clock)

    def test_get_miss_returns_none_without_mutation(self, cache):
        """Test a miss does not create entries or count hits."""
        assert cache.get("austin") is None
        assert len(cache) == 0
        assert cache.stats() == CacheStats(size=0, total_hits=0)

    def test_put_then_get_counts_hits(self, cache):
        """Test each hit increments the entry's hit count."""
        result = make_geocode_result("austin")
        cache.put("austin", result)

        first = cache.get("austin")
        second = cache.get("austin")

        assert first is second
        assert second.result == result
        assert second.hit_count == 2
        assert cache.stats() == CacheStats(size=1, total_hits=2)

    def test_entry_live_until_expiry(self, cache, fake_clock):
        """Test an entry is served until exactly cache_expiry has elapsed."""
        cache.put("austin", make_geocode_result("austin"))

        fake_clock.advance(3599.5)
        assert cache.get("austin") is not None

        fake_clock.advance(0.5)
        assert cache.get("austin") is None

    def test_expired_entries_excluded_from_stats(self, cache, fake_clock):
        """Test stats only count live entries."""
        cache.put("austin", make_geocode_result("austin"))
        cache.get("austin")
        fake_clock.advance(1800)
        cache.put("tahoe", make_geocode_result("tahoe"))
        fake_clock.advance(1800)

        assert cache.stats() == CacheStats(size=1, total_hits=0)

    def test_overwrite_resets_hit_count(self, cache):
        """Test putting an existing key replaces the entry."""
        cache.put("austin", make_geocode_result("austin", 0.6))
        cache.get("austin")

        cache.put("austin", make_geocode_result("austin", 0.9))
        entry = cache.get("austin")

        assert entry.hit_count == 1
        assert entry.result.confidence == 0.9

    def test_cleanup_removes_expired(self, cache, fake_clock):
        """Test explicit cleanup drops expired entries."""
        cache.put("austin", make_geocode_result("austin"))
        cache.put("tahoe", make_geocode_result("tahoe"))
        fake_clock.advance(3600)

        assert cache.cleanup() == 2
        assert len(cache) == 0

    def test_insert_past_cleanup_ratio_purges_expired(self, fake_clock):
        """Test inserting past 80% full sweeps expired entries."""
        cache = GeocodeCache(cache_expiry=60, max_cache_size=10, clock=fake_clock)
        for i in range(8):
            cache.put(f"q{i}", make_geocode_result(f"q{i}"))
        fake_clock.advance(61)

        cache.put("fresh", make_geocode_result("fresh"))

        assert len(cache) == 1
        assert cache.get("fresh") is not None

    def test_eviction_prefers_least_hit_then_oldest(self, cache):
        """Test the least used, oldest entries are evicted first."""
        for i in range(4):
            cache.put(f"q{i}", make_geocode_result(f"q{i}"))
        cache.get("q0")
        cache.get("q0")
        cache.get("q1")

        cache.put("q4", make_geocode_result("q4"))
        assert len(cache) == 5

        cache.put("q5", make_geocode_result("q5"))

        assert len(cache) == 5
        assert cache.get("q2") is None
        for key in ("q0", "q1", "q3", "q4", "q5"):
            assert cache.get(key) is not None

    def test_size_never_exceeds_capacity(self, cache):
        """Test the store stays bounded under many inserts."""
        for i in range(50):
            cache.put(f"q{i}", make_geocode_result(f"q{i}"))
            assert len(cache) <= cache.max_cache_size

    def test_concurrent_puts_stay_bounded(self, fake_clock):
        """Test concurrent writers never push the store past capacity."""
        cache = GeocodeCache(cache_expiry=3600, max_cache_size=20, clock=fake_clock)

        def writer(prefix: str) -> None:
            for i in range(100):
                cache.put(f"{prefix}-{i}", make_geocode_result(f"{prefix}{i}"))
                cache.get(f"{prefix}-{i}")

        threads = [threading.Thread(target=writer, args=(f"t{n}",)) for n in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(cache) <= 20
        assert cache.stats().size == len(cache)

    @pytest.mark.parametrize(
        "kwargs", [{"cache_expiry": 0}, {"max_cache_size": 0}, {"max_cache_size": -5}]
    )
    def test_rejects_non_positive_limits(self, kwargs):
        """Test constructor validates its limits."""
        with pytest.raises(ValueError):
            GeocodeCache(**kwargs)
