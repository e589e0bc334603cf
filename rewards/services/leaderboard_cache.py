"""
TTL cache for composed leaderboard responses.

Entries expire after a fixed TTL and the cache holds a bounded number of keys.
When full, inserting a new key evicts the oldest inserted key; reads do not
change eviction order.
"""

import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Hashable, Optional, Tuple

from rewards.config import Config

logger = logging.getLogger(__name__)


class LeaderboardResultCache:
    """Insertion-ordered TTL cache keyed by (timeframe, limit)."""

    def __init__(
        self,
        ttl: Optional[float] = None,
        max_entries: Optional[int] = None,
        clock: Callable[[], float] = time.time
    ):
        """
        Initialize the cache.

        Args:
            ttl: Seconds an entry stays valid, defaults to Config.LEADERBOARD_CACHE_TTL
            max_entries: Key bound, defaults to Config.LEADERBOARD_CACHE_MAX_ENTRIES
            clock: Returns the current time in seconds
        """
        self._ttl = ttl if ttl is not None else Config.LEADERBOARD_CACHE_TTL
        self._max_entries = max_entries if max_entries is not None else Config.LEADERBOARD_CACHE_MAX_ENTRIES
        self._clock = clock
        self._cache: "OrderedDict[Hashable, Tuple[float, Any]]" = OrderedDict()  # key -> (stored_at, value)
        self._lock = threading.Lock()

    def get(self, key: Hashable) -> Optional[Any]:
        """Return the cached value, or None when missing or expired."""
        with self._lock:
            if key not in self._cache:
                logger.debug(f"Leaderboard cache miss for {key}")
                return None

            stored_at, value = self._cache[key]
            if self._clock() - stored_at < self._ttl:
                logger.debug(f"Leaderboard cache hit for {key}")
                return value

            del self._cache[key]
            logger.debug(f"Leaderboard cache entry expired for {key}")
            return None

    def set(self, key: Hashable, value: Any):
        """Store a value stamped with the current clock reading."""
        with self._lock:
            if key in self._cache:
                # Refresh in place, insertion position is kept
                self._cache[key] = (self._clock(), value)
                return

            while len(self._cache) >= self._max_entries:
                evicted_key, _ = self._cache.popitem(last=False)
                logger.debug(f"Evicted oldest leaderboard cache entry {evicted_key}")

            self._cache[key] = (self._clock(), value)

    def clear(self):
        """Drop every entry. Called whenever claim or profile data changes."""
        with self._lock:
            self._cache.clear()
        logger.info("Leaderboard cache cleared.")

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._cache
