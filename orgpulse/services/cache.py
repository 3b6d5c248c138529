"""
Explicit TTL cache for orchestrated insight reports.

Owned and passed in by the orchestrator; the analytics engine itself never
caches. Entries expire ``ttl_seconds`` after they are stored.
"""

import time
from dataclasses import dataclass
from threading import Lock
from typing import Any, Callable, Hashable, Optional

import structlog

logger = structlog.get_logger(__name__)


@dataclass
class _CacheEntry:
    """Stored value with its expiry on the cache clock."""

    value: Any
    expires_at: float


class InsightsCache:
    """
    Thread-safe in-process cache with a fixed time-to-live.

    Attributes:
        ttl_seconds: Lifetime of every entry

    Example:
        >>> cache = InsightsCache(ttl_seconds=300)
        >>> cache.set(("report", 90), report)
        >>> cache.get(("report", 90)) is report
        True
    """

    def __init__(self, ttl_seconds: float, clock: Optional[Callable[[], float]] = None):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.ttl_seconds = ttl_seconds
        self._clock = clock or time.monotonic
        self._entries: dict[Hashable, _CacheEntry] = {}
        self._lock = Lock()

    def get(self, key: Hashable) -> Optional[Any]:
        """Return the cached value, or None when missing or expired."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expires_at <= now:
                del self._entries[key]
                logger.debug("insights_cache_expired", key=str(key))
                return None
            return entry.value

    def set(self, key: Hashable, value: Any) -> None:
        with self._lock:
            self._entries[key] = _CacheEntry(value=value, expires_at=self._clock() + self.ttl_seconds)

    def invalidate(self, key: Optional[Hashable] = None) -> None:
        """Drop one entry, or every entry when key is None."""
        with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
