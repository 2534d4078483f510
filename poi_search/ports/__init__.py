"""Ports layer - Abstract interfaces (Protocols) for the application.

Ports define the contracts between the search core and external
adapters. They enable dependency injection and make the system testable.

This module follows the Hexagonal Architecture pattern:
- Input ports: How the application is driven (services)
- Output ports: How the application drives external systems (adapters)
"""

from .cache import CachePort
from .geocoding import GeocoderPort
from .location import DeviceLocationSourcePort
from .places import PlacesProviderPort
from .preferences import PreferencesPort

__all__ = [
    # Search
    "PlacesProviderPort",
    # Location
    "GeocoderPort",
    "DeviceLocationSourcePort",
    # Settings
    "PreferencesPort",
    # Cache
    "CachePort",
]
