"""
Cache service module for short-circuiting repeated identical requests.

This module provides:
- An in-memory response cache keyed by request path
- Per-entry time-to-live with lazy expiry on lookup
- A capacity bound with least-recently-used eviction
- Hit/miss counters for the health endpoint
"""

import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from cachetools import TLRUCache


@dataclass(frozen=True)
class CacheEntry:
    """Serialized response body and the TTL it was stored with."""
    value: Any
    ttl: float


def _time_to_use(key: str, entry: CacheEntry, now: float) -> float:
    return now + entry.ttl


class ResponseCache:
    """
    Process-wide key -> response body store.

    Values are re-derivations of the same upstream data, so concurrent puts
    for one key need no ordering: the last write wins.

    Example:
        >>> cache = ResponseCache(max_entries=100, default_ttl=3600)
        >>> cache.put("/song/dQw4w9WgXcQ", {"id": "dQw4w9WgXcQ"})
        >>> cache.get("/song/dQw4w9WgXcQ")
        {'id': 'dQw4w9WgXcQ'}
    """

    def __init__(
        self,
        max_entries: int = 1024,
        default_ttl: float = 3600,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_entries = max_entries
        self.default_ttl = default_ttl
        self._entries = TLRUCache(maxsize=max_entries, ttu=_time_to_use, timer=timer)
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None when absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return None
            self.hits += 1
            return entry.value

    def put(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """Store value under key, overwriting any previous entry."""
        ttl = self.default_ttl if ttl is None else ttl
        with self._lock:
            self._entries.expire()
            if ttl <= 0:
                self._entries.pop(key, None)
                return
            self._entries[key] = CacheEntry(value=value, ttl=ttl)

    def clear(self) -> int:
        """Drop every entry. Returns the number of entries removed."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            return count

    def __len__(self) -> int:
        with self._lock:
            self._entries.expire()
            return len(self._entries)

    def stats(self) -> Dict[str, int]:
        return {
            "entries": len(self),
            "maxEntries": self.max_entries,
            "hits": self.hits,
            "misses": self.misses,
        }
