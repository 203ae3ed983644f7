"""Time-limited cache of Horizon API responses."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Any

from cachetools import TTLCache

from .horizon_errors import CacheError


@dataclass(frozen=True)
class CacheStats:
    """Counts describing the cache's use."""

    entries: int
    hits: int
    misses: int


class ResponseCache:
    """Caches decoded JSON responses by key for ``ttl`` seconds."""

    def __init__(self, ttl: float) -> None:
        self.ttl = ttl
        self._cache: TTLCache[str, Any] = TTLCache(maxsize=sys.maxsize, ttl=ttl)
        self._hits = 0
        self._misses = 0

    async def get(self, key: str) -> Any:
        """The cached value for ``key``; raises CacheError on a miss."""
        try:
            value = self._cache[key]
        except KeyError:
            self._misses += 1
            raise CacheError("Cache miss") from None
        self._hits += 1
        return value

    async def set(self, key: str, value: Any) -> None:
        """Store a value under ``key``."""
        self._cache[key] = value

    async def clear(self) -> None:
        """Remove every entry."""
        self._cache.clear()

    def stats(self) -> CacheStats:
        """Live entry count and hit/miss counters."""
        self._cache.expire()
        return CacheStats(entries=len(self._cache), hits=self._hits, misses=self._misses)

    def hit_rate(self) -> float:
        """Percentage of lookups that were hits; 0.0 before any lookup."""
        total = self._hits + self._misses
        if total == 0:
            return 0.0
        return self._hits / total * 100.0

    def reset_stats(self) -> None:
        """Zero the hit and miss counters."""
        self._hits = 0
        self._misses = 0