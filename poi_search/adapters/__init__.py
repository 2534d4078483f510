"""Adapters layer - Concrete implementations of ports.

This module contains implementations of the port interfaces,
connecting the search layer to external systems like:
- Place-search backends (Google Places, Geoapify, HERE)
- Geocoding services (geopy)
- Device location (static source)
- Preference storage (in-memory)
- Caching systems (in-memory, null)
"""
