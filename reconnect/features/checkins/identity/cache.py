"""
In-memory identity cache for directory lookups.

Bounded TTL + LRU map from a raw identifier to its ResolvedContact. Failed
lookups are cached too (negative caching) so a directory tool that keeps
failing is not retried until the entry expires.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

from reconnect.features.checkins.domain import CacheEntry, CacheStats, ResolvedContact
from reconnect.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TTL_SECONDS = 30 * 60
DEFAULT_CAPACITY = 1000


class IdentityCache:
    """TTL + LRU cache; every mutation happens under a single lock."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        capacity: int = DEFAULT_CAPACITY,
        negative_ttl_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if capacity < 1:
            raise ValueError("capacity must be at least 1")

        self.ttl = float(ttl_seconds)
        self.negative_ttl = float(negative_ttl_seconds) if negative_ttl_seconds else self.ttl
        self.capacity = capacity
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def _live_entry(self, key: str, now: float) -> CacheEntry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if now > entry.expires_at:
            del self._entries[key]
            return None
        return entry

    def has(self, key: str) -> bool:
        with self._lock:
            return self._live_entry(key, self._clock()) is not None

    def get(self, key: str) -> ResolvedContact | None:
        with self._lock:
            now = self._clock()
            entry = self._live_entry(key, now)
            if entry is None:
                return None
            entry.last_accessed_at = now
            return entry.value

    def set(self, key: str, value: ResolvedContact) -> None:
        with self._lock:
            now = self._clock()
            ttl = self.ttl if value.is_resolved else self.negative_ttl
            self._entries[key] = CacheEntry(
                value=value,
                expires_at=now + ttl,
                created_at=now,
                last_accessed_at=now,
            )
            if len(self._entries) > self.capacity:
                self._evict_least_recently_used()

    def _evict_least_recently_used(self) -> None:
        oldest_key = min(self._entries, key=lambda k: self._entries[k].last_accessed_at)
        del self._entries[oldest_key]
        logger.debug("Identity cache evicted entry", remaining=len(self._entries))

    def sweep(self) -> int:
        """Drop every expired entry, whether or not anyone asks for it again."""
        with self._lock:
            now = self._clock()
            expired = [key for key, entry in self._entries.items() if now > entry.expires_at]
            for key in expired:
                del self._entries[key]
            remaining = len(self._entries)

        logger.info("Identity cache sweep", removed=len(expired), remaining=remaining)
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def stats(self) -> CacheStats:
        with self._lock:
            now = self._clock()
            entries = list(self._entries.values())

        resolved = sum(1 for entry in entries if entry.value.is_resolved)
        fresh = sum(1 for entry in entries if now - entry.created_at < self.ttl / 2)
        return CacheStats(
            total_entries=len(entries),
            resolved=resolved,
            unresolved=len(entries) - resolved,
            fresh=fresh,
            aging=len(entries) - fresh,
        )
