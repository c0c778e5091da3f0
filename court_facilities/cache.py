"""
Explicit query cache with manual invalidation keys.

Keys are tuples whose first element names the list being cached, e.g.
``("court-sessions", "2025-10-22", "AM", "100")``. Invalidating
``("court-sessions",)`` drops every entry that starts with that prefix.

Loaders run outside the lock. A load that overlaps an invalidation returns
its rows to the caller but is not stored, so the next read refetches.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Hashable, Iterable

logger = logging.getLogger(__name__)

CacheKey = tuple[Hashable, ...]


class QueryCache:
    """Thread-safe memo of list reads keyed by tuples."""

    def __init__(self) -> None:
        self._entries: dict[CacheKey, Any] = {}
        self._generation = 0
        self._lock = threading.Lock()

    def get_or_load(self, key: CacheKey, loader: Callable[[], Any]) -> Any:
        with self._lock:
            if key in self._entries:
                return self._entries[key]
            generation = self._generation
        value = loader()
        with self._lock:
            if self._generation == generation:
                self._entries[key] = value
            else:
                logger.debug("Not caching %s: invalidated during load", key)
        return value

    def get(self, key: CacheKey, default: Any = None) -> Any:
        with self._lock:
            return self._entries.get(key, default)

    def set(self, key: CacheKey, value: Any) -> None:
        with self._lock:
            self._entries[key] = value

    def invalidate(self, *prefixes: CacheKey | str) -> int:
        """Drop every entry whose key starts with one of ``prefixes``."""
        normalized = [(p,) if isinstance(p, str) else tuple(p) for p in prefixes]
        with self._lock:
            self._generation += 1
            doomed = [
                key
                for key in self._entries
                if any(key[: len(prefix)] == prefix for prefix in normalized)
            ]
            for key in doomed:
                del self._entries[key]
        if doomed:
            logger.debug("Invalidated %d cache entries for %s", len(doomed), normalized)
        return len(doomed)

    def keys(self) -> Iterable[CacheKey]:
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._generation += 1
            self._entries.clear()
