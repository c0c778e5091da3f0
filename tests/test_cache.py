"""Tests for the prefix-invalidated query cache."""

import pytest

from court_facilities.cache import QueryCache


class TestQueryCache:
    """Loads once per key; invalidation drops by key prefix."""

    def test_loader_runs_once(self):
        cache = QueryCache()
        calls = []

        def load():
            calls.append(1)
            return ["row"]

        assert cache.get_or_load(("court-sessions", "2025-10-22"), load) == ["row"]
        assert cache.get_or_load(("court-sessions", "2025-10-22"), load) == ["row"]
        assert len(calls) == 1

    def test_invalidate_by_prefix(self):
        cache = QueryCache()
        cache.set(("court-sessions", "2025-10-22", "AM"), 1)
        cache.set(("court-sessions", "2025-10-22", "PM"), 2)
        cache.set(("coverage-assignments", "2025-10-22"), 3)
        assert cache.invalidate("court-sessions") == 2
        assert cache.keys() == [("coverage-assignments", "2025-10-22")]

    def test_invalidate_narrow_prefix(self):
        cache = QueryCache()
        cache.set(("court-sessions", "2025-10-22", "AM"), 1)
        cache.set(("court-sessions", "2025-10-23", "AM"), 2)
        cache.invalidate(("court-sessions", "2025-10-22"))
        assert cache.get(("court-sessions", "2025-10-22", "AM")) is None
        assert cache.get(("court-sessions", "2025-10-23", "AM")) == 2

    def test_failed_load_is_not_cached(self):
        cache = QueryCache()

        def boom():
            raise RuntimeError("db down")

        with pytest.raises(RuntimeError):
            cache.get_or_load(("spaces",), boom)
        assert cache.keys() == []

    def test_load_overlapping_invalidation_is_not_stored(self):
        cache = QueryCache()
        rows = ["old"]

        def load_while_writer_commits():
            snapshot = list(rows)
            rows.append("new")
            cache.invalidate("court-sessions")
            return snapshot

        key = ("court-sessions", "2025-10-22")
        assert cache.get_or_load(key, load_while_writer_commits) == ["old"]
        assert cache.keys() == []
        assert cache.get_or_load(key, lambda: list(rows)) == ["old", "new"]
