"""Null cache for tests.

Every lookup misses, so a geocoder wired with it always goes to its
backend. Use it when a test counts remote calls.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass
class NullCache(Generic[T]):
    """No-op CachePort implementation - always misses."""

    name: str = "null"

    def get(self, key: str) -> Optional[T]:
        return None

    def set(self, key: str, value: T, ttl: Optional[float] = None) -> None:
        pass

    def invalidate(self, key: str) -> bool:
        return False

    def clear(self) -> int:
        return 0
