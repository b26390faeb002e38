"""
Size and time bounded in-memory cache for query results.

Entries are keyed by ``(namespace, key_tuple)`` so that a whole family of
results (for example every cached member page) can be invalidated at once
after a write.
"""
import time
from collections import OrderedDict
from threading import Lock
from typing import Any, Callable, Hashable, Optional, Tuple

import structlog

logger = structlog.get_logger(__name__)

MEMBER_QUERY_NAMESPACE = "member_query"
COLLECTOR_SCOPE_NAMESPACE = "collector_scope"
SUMMARY_NAMESPACE = "summary"


class CacheEntry:
    """Represents a cached value with expiration time."""

    def __init__(self, value: Any, ttl_seconds: float, now: float):
        self.value = value
        self.expires_at = now + ttl_seconds

    def is_expired(self, now: float) -> bool:
        """Check if the cache entry has expired."""
        return now >= self.expires_at


class QueryCache:
    """
    LRU cache with per-entry TTL.

    Thread-safe for concurrent access. ``clock`` is injectable so expiry
    can be tested without sleeping.
    """

    def __init__(self, max_entries: int = 1024, clock: Callable[[], float] = time.monotonic):
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[Tuple[str, Hashable], CacheEntry]" = OrderedDict()
        self._lock = Lock()

    def get(self, namespace: str, key: Hashable) -> Optional[Any]:
        """
        Get a value from the cache.

        Returns:
            Cached value or None if not found or expired
        """
        full_key = (namespace, key)
        with self._lock:
            entry = self._entries.get(full_key)
            if entry is None:
                return None

            if entry.is_expired(self._clock()):
                del self._entries[full_key]
                return None

            self._entries.move_to_end(full_key)
            return entry.value

    def set(self, namespace: str, key: Hashable, value: Any, ttl_seconds: float) -> None:
        """Set a value in the cache with TTL, evicting the least recently used entry when full."""
        if ttl_seconds <= 0:
            return

        full_key = (namespace, key)
        with self._lock:
            self._entries[full_key] = CacheEntry(value, ttl_seconds, self._clock())
            self._entries.move_to_end(full_key)
            while len(self._entries) > self.max_entries:
                evicted_key, _ = self._entries.popitem(last=False)
                logger.debug("Cache entry evicted", namespace=evicted_key[0])

    def delete(self, namespace: str, key: Hashable) -> None:
        """Delete a value from the cache."""
        with self._lock:
            self._entries.pop((namespace, key), None)

    def invalidate_namespace(self, namespace: str) -> int:
        """Drop every entry in a namespace. Returns the number of entries removed."""
        with self._lock:
            doomed = [key for key in self._entries if key[0] == namespace]
            for key in doomed:
                del self._entries[key]

        if doomed:
            logger.info("Cache namespace invalidated", namespace=namespace, entries=len(doomed))
        return len(doomed)

    def clear(self) -> None:
        """Clear all cache entries."""
        with self._lock:
            self._entries.clear()

    def size(self) -> int:
        """Get the number of entries in the cache."""
        with self._lock:
            return len(self._entries)
