"""Preference adapters - Implementations of PreferencesPort.

Available implementations:
- InMemoryPreferencesStore: process-lifetime store seeded from config
"""

from .memory_store import InMemoryPreferencesStore

__all__ = ["InMemoryPreferencesStore"]
