"""Bounded LRU cache with per-entry expiry.

Holds forward-geocoding results so that re-resolving the same default
location after an invalidation does not cost another remote call.
Geocoding runs in worker threads, hence the lock.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(slots=True)
class _Entry(Generic[T]):
    value: T
    expires_at: float

    def expired(self, now: float) -> bool:
        return now >= self.expires_at


@dataclass
class InMemoryCache(Generic[T]):
    """LRU cache keyed by string, implements CachePort.

    Reads refresh recency. When full, expired entries are purged first and
    the least recently used entry goes next.

    Attributes:
        default_ttl_seconds: Lifetime of entries stored without a ttl (None = forever)
        max_size: Entry bound (None = unbounded)
        name: Suffix of the logger name

    Example:
        cache = InMemoryCache[Coordinate](name="geocode", default_ttl_seconds=3600)
        cache.set("geoapify:pasadena, ca", Coordinate(34.14, -118.14))
    """

    default_ttl_seconds: Optional[float] = None
    max_size: Optional[int] = None
    name: str = "cache"

    _entries: OrderedDict[str, _Entry[T]] = field(default_factory=OrderedDict, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _counters: Dict[str, int] = field(
        default_factory=lambda: {"hits": 0, "misses": 0, "evictions": 0}, repr=False
    )
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(f"{__name__}.{self.name}")

    def get(self, key: str) -> Optional[T]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry.expired(time.monotonic()):
                del self._entries[key]
                entry = None
            if entry is None:
                self._counters["misses"] += 1
                return None
            self._entries.move_to_end(key)
            self._counters["hits"] += 1
            return entry.value

    def set(self, key: str, value: T, ttl: Optional[float] = None) -> None:
        lifetime = self.default_ttl_seconds if ttl is None else ttl
        now = time.monotonic()
        with self._lock:
            self._entries.pop(key, None)
            if self.max_size is not None and len(self._entries) >= self.max_size:
                self._make_room(now)
            expires_at = float("inf") if lifetime is None else now + lifetime
            self._entries[key] = _Entry(value, expires_at)
        self._logger.debug("Cache entry stored", extra={"key": key, "ttl": lifetime})

    def invalidate(self, key: str) -> bool:
        with self._lock:
            removed = self._entries.pop(key, None) is not None
        if removed:
            self._logger.debug("Cache entry invalidated", extra={"key": key})
        return removed

    def clear(self) -> int:
        with self._lock:
            dropped = len(self._entries)
            self._entries.clear()
            for counter in self._counters:
                self._counters[counter] = 0
        self._logger.info("Cache cleared", extra={"entries_cleared": dropped})
        return dropped

    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    def stats(self) -> Dict[str, Any]:
        """Counters plus current size and hit rate."""
        with self._lock:
            lookups = self._counters["hits"] + self._counters["misses"]
            rate = self._counters["hits"] / lookups * 100 if lookups else 0.0
            return {
                "size": len(self._entries),
                **self._counters,
                "hit_rate_percent": round(rate, 1),
            }

    def _make_room(self, now: float) -> None:
        # Caller holds the lock.
        for stale in [k for k, e in self._entries.items() if e.expired(now)]:
            del self._entries[stale]
        while self.max_size is not None and len(self._entries) >= self.max_size:
            evicted, _ = self._entries.popitem(last=False)
            self._counters["evictions"] += 1
            self._logger.debug("Cache evicted entry", extra={"key": evicted})
