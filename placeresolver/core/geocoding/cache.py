"""In-memory geocode result cache.

Entries expire after a fixed TTL. Under capacity pressure the least
frequently hit entries are evicted first, oldest first among equals, so
popular queries survive bursts of one-off lookups.
"""

import itertools
import threading
import time
from collections.abc import Callable
from typing import Optional

from placeresolver.core.geocoding.constants import (
    CACHE_EXPIRY_SECONDS,
    CLEANUP_RATIO,
    MAX_CACHE_SIZE,
)
from placeresolver.core.geocoding.models import CacheEntry, CacheStats, GeocodeResult
from placeresolver.core.logging import get_logger

logger = get_logger(__name__)


class GeocodeCache:
    """Bounded, time-expiring, frequency-tracked key → result map.

    All public methods take the same lock, so no caller ever observes the
    store mid-eviction.
    """

    def __init__(
        self,
        cache_expiry: float = CACHE_EXPIRY_SECONDS,
        max_cache_size: int = MAX_CACHE_SIZE,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the cache.

        Args:
            cache_expiry: Seconds an entry stays eligible for hits
            max_cache_size: Hard cap on entries after any mutation
            clock: Source of the current time in seconds
        """
        if cache_expiry <= 0:
            raise ValueError(f"cache_expiry must be positive, got {cache_expiry}")
        if max_cache_size <= 0:
            raise ValueError(f"max_cache_size must be positive, got {max_cache_size}")

        self.cache_expiry = cache_expiry
        self.max_cache_size = max_cache_size
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._sequence = itertools.count()
        self._lock = threading.Lock()

    def _is_expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.timestamp >= self.cache_expiry

    def get(self, key: str) -> Optional[CacheEntry]:
        """Return the live entry for ``key`` and count the hit.

        A miss (absent or expired) changes nothing.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or self._is_expired(entry, self._clock()):
                logger.debug("geocode_cache_miss", key=key)
                return None
            entry.hit_count += 1
            logger.debug("geocode_cache_hit", key=key, hit_count=entry.hit_count)
            return entry

    def put(self, key: str, result: GeocodeResult) -> None:
        """Insert or overwrite ``key``, cleaning up once the store is 80% full."""
        with self._lock:
            self._entries[key] = CacheEntry(
                result=result,
                timestamp=self._clock(),
                hit_count=0,
                sequence=next(self._sequence),
            )
            if len(self._entries) > self.max_cache_size * CLEANUP_RATIO:
                self._cleanup()

    def cleanup(self) -> int:
        """Remove expired entries, then evict down to capacity.

        Returns:
            Number of entries removed
        """
        with self._lock:
            return self._cleanup()

    def _cleanup(self) -> int:
        now = self._clock()
        expired = [k for k, e in self._entries.items() if self._is_expired(e, now)]
        for key in expired:
            del self._entries[key]

        evicted = 0
        overflow = len(self._entries) - self.max_cache_size
        if overflow > 0:
            ranked = sorted(
                self._entries.items(),
                key=lambda item: (item[1].hit_count, item[1].sequence),
            )
            for key, _ in ranked[:overflow]:
                del self._entries[key]
            evicted = overflow

        if expired or evicted:
            logger.debug(
                "geocode_cache_cleanup",
                expired=len(expired),
                evicted=evicted,
                size=len(self._entries),
            )
        return len(expired) + evicted

    def stats(self) -> CacheStats:
        """Size and total hits over live entries."""
        with self._lock:
            now = self._clock()
            live = [e for e in self._entries.values() if not self._is_expired(e, now)]
            return CacheStats(size=len(live), total_hits=sum(e.hit_count for e in live))

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
