"""Geocoding adapters - Implementations of GeocoderPort.

Available implementations:
- GeopyGeocoderAdapter: geopy GoogleV3 / HereV7, rate limited and cached
- GeoapifyGeocoderAdapter: Geoapify geocoding API over httpx, cached
"""

from .geoapify_adapter import GeoapifyGeocoderAdapter
from .geopy_adapter import GeopyGeocoderAdapter

__all__ = ["GeoapifyGeocoderAdapter", "GeopyGeocoderAdapter"]
