"""
Tests for the query cache.
"""
import pytest

from app.core.cache import MEMBER_QUERY_NAMESPACE, SUMMARY_NAMESPACE, QueryCache


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class TestQueryCache:
    """Test cases for QueryCache."""

    @pytest.fixture
    def clock(self):
        return FakeClock()

    @pytest.fixture
    def cache(self, clock):
        return QueryCache(max_entries=3, clock=clock)

    def test_set_and_get(self, cache):
        cache.set(MEMBER_QUERY_NAMESPACE, ("jane", 1), "page", ttl_seconds=30)

        assert cache.get(MEMBER_QUERY_NAMESPACE, ("jane", 1)) == "page"
        assert cache.get(SUMMARY_NAMESPACE, ("jane", 1)) is None

    def test_entry_expires(self, cache, clock):
        cache.set(SUMMARY_NAMESPACE, "Smith", "summary", ttl_seconds=30)

        clock.now += 29
        assert cache.get(SUMMARY_NAMESPACE, "Smith") == "summary"

        clock.now += 1
        assert cache.get(SUMMARY_NAMESPACE, "Smith") is None
        assert cache.size() == 0

    def test_zero_ttl_is_not_stored(self, cache):
        cache.set(SUMMARY_NAMESPACE, "Smith", "summary", ttl_seconds=0)

        assert cache.size() == 0

    def test_least_recently_used_is_evicted(self, cache):
        cache.set(SUMMARY_NAMESPACE, "a", 1, ttl_seconds=30)
        cache.set(SUMMARY_NAMESPACE, "b", 2, ttl_seconds=30)
        cache.set(SUMMARY_NAMESPACE, "c", 3, ttl_seconds=30)

        # Touch "a" so "b" becomes the oldest
        cache.get(SUMMARY_NAMESPACE, "a")
        cache.set(SUMMARY_NAMESPACE, "d", 4, ttl_seconds=30)

        assert cache.get(SUMMARY_NAMESPACE, "b") is None
        assert cache.get(SUMMARY_NAMESPACE, "a") == 1
        assert cache.size() == 3

    def test_invalidate_namespace(self, cache):
        cache.set(SUMMARY_NAMESPACE, "Smith", 1, ttl_seconds=30)
        cache.set(SUMMARY_NAMESPACE, "Jones", 2, ttl_seconds=30)
        cache.set(MEMBER_QUERY_NAMESPACE, "q", 3, ttl_seconds=30)

        assert cache.invalidate_namespace(SUMMARY_NAMESPACE) == 2
        assert cache.get(MEMBER_QUERY_NAMESPACE, "q") == 3
        assert cache.size() == 1

    def test_delete_and_clear(self, cache):
        cache.set(SUMMARY_NAMESPACE, "Smith", 1, ttl_seconds=30)
        cache.set(SUMMARY_NAMESPACE, "Jones", 2, ttl_seconds=30)

        cache.delete(SUMMARY_NAMESPACE, "Smith")
        assert cache.get(SUMMARY_NAMESPACE, "Smith") is None

        cache.clear()
        assert cache.size() == 0
