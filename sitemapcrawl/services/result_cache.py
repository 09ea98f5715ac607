import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Optional

from sitemapcrawl.domain.crawl_options import CrawlOptions


def cache_key(url: str, options: CrawlOptions) -> str:
    """Key used to deduplicate identical crawl requests."""
    return options.cache_key(url)


@dataclass(frozen=True)
class _CacheEntry:
    value: Any
    stored_at: float


class ResultCache:
    """
    In-memory cache for finished sitemap jobs keyed by `cache_key`.

    Stands in for an external cache backend; anything with the same
    get/set/clear interface can replace it in the container.
    """

    def __init__(self, *, max_size: int = 256, ttl_seconds: int = 3600, clock=time.time):
        """Create a result cache.

        - `max_size` bounds the number of cached results (LRU eviction).
        - `ttl_seconds` bounds staleness; entries older than TTL are treated as missing.
        """
        self._max_size = int(max_size) if max_size is not None else 256
        if self._max_size <= 0:
            self._max_size = 1

        self._ttl_seconds = int(ttl_seconds) if ttl_seconds is not None else 3600
        if self._ttl_seconds <= 0:
            # Treat non-positive TTL as "don't cache" by expiring immediately.
            self._ttl_seconds = 0

        self._clock = clock
        self._lock = threading.Lock()
        self._cache: "OrderedDict[str, _CacheEntry]" = OrderedDict()

    def _is_expired(self, entry: _CacheEntry) -> bool:
        if self._ttl_seconds == 0:
            return True
        return (self._clock() - entry.stored_at) > self._ttl_seconds

    def _evict_if_needed(self) -> None:
        while len(self._cache) > self._max_size:
            self._cache.popitem(last=False)

    def get(self, key: str) -> Optional[Any]:
        """Get a cached result, or None if missing or expired."""
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None
            if self._is_expired(entry):
                self._cache.pop(key, None)
                return None
            # Refresh LRU order on hit
            self._cache.move_to_end(key)
            return entry.value

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._cache[key] = _CacheEntry(value=value, stored_at=self._clock())
            self._cache.move_to_end(key)
            self._evict_if_needed()

    def clear(self) -> None:
        """Clear entire cache. Useful for testing or manual cache invalidation."""
        with self._lock:
            self._cache.clear()
