"""
Read-through cache for catalog and program reads

Keyed in-memory cache with TTL expiry and LRU eviction. Entries can be
listed and invalidated so cached reference data is never ambient state.
"""

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, List

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    value: Any
    created_at: float
    hit_count: int = 0


class TTLCache:
    """
    Keyed cache with per-entry expiry.

    Clock is injectable so expiry can be driven by tests. One instance is
    shared by all request threads, so every access to the entries holds the
    lock; loaders run outside it.
    """

    DEFAULT_TTL = 300
    MAX_SIZE = 256

    def __init__(self, ttl: float = DEFAULT_TTL, max_size: int = MAX_SIZE,
                 clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self.max_size = max_size
        self._clock = clock
        self._lock = threading.Lock()
        self._cache: "OrderedDict[Hashable, CacheEntry]" = OrderedDict()
        self._stats = {
            "hits": 0,
            "misses": 0,
            "evictions": 0
        }

    def get(self, key: Hashable, default: Any = None) -> Any:
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                self._stats["misses"] += 1
                return default

            if self._clock() - entry.created_at > self.ttl:
                del self._cache[key]
                self._stats["misses"] += 1
                return default

            self._cache.move_to_end(key)
            entry.hit_count += 1
            self._stats["hits"] += 1
            return entry.value

    def set(self, key: Hashable, value: Any) -> None:
        with self._lock:
            self._cache.pop(key, None)
            while len(self._cache) >= self.max_size:
                self._cache.popitem(last=False)
                self._stats["evictions"] += 1
            self._cache[key] = CacheEntry(value=value, created_at=self._clock())

    def get_or_load(self, key: Hashable, loader: Callable[[], Any]) -> Any:
        """Return the cached value for key, calling loader on a miss."""
        sentinel = object()
        value = self.get(key, sentinel)
        if value is not sentinel:
            return value
        logger.debug("Cache miss for %r, loading", key)
        value = loader()
        self.set(key, value)
        return value

    def invalidate(self, key: Hashable = None) -> None:
        """Drop one key, or everything when key is None."""
        with self._lock:
            if key is None:
                self._cache.clear()
            else:
                self._cache.pop(key, None)

    def keys(self) -> List[Hashable]:
        now = self._clock()
        with self._lock:
            return [k for k, e in self._cache.items() if now - e.created_at <= self.ttl]

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            stats = dict(self._stats, size=len(self._cache))
        total = stats["hits"] + stats["misses"]
        stats["hit_rate"] = stats["hits"] / total if total else 0.0
        return stats

    def __len__(self):
        return len(self._cache)
