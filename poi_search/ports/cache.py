"""Key/value cache used by the geocoders.

Forward lookups (provider plus normalized address to coordinate) are
stored here so a re-resolution after invalidation can skip the remote
call. Tests swap in a cache that never hits.
"""

from __future__ import annotations

from typing import Optional, Protocol, TypeVar

T = TypeVar("T")


class CachePort(Protocol[T]):
    """String-keyed cache with optional per-entry lifetime.

    Implementations:
    - InMemoryCache: bounded LRU with expiry
    - NullCache: always misses
    """

    def get(self, key: str) -> Optional[T]:
        """Stored value, or None when absent or expired."""
        ...

    def set(self, key: str, value: T, ttl: Optional[float] = None) -> None:
        """Store ``value``; ``ttl`` seconds overrides the cache default."""
        ...

    def invalidate(self, key: str) -> bool:
        """Remove one entry. Returns whether it was present."""
        ...

    def clear(self) -> int:
        """Drop everything and return how many entries were removed."""
        ...
