"""Place-search adapters - Implementations of PlacesProviderPort.

Available implementations:
- GooglePlacesAdapter: Google Places web service
- GeoapifyPlacesAdapter: Geoapify Places API
- HerePlacesAdapter: HERE Geocoding & Search
"""

from .base import BasePlacesAdapter
from .geoapify_adapter import GeoapifyPlacesAdapter
from .google_adapter import GooglePlacesAdapter
from .here_adapter import HerePlacesAdapter
from .http import build_http_client, http_get_json

__all__ = [
    "BasePlacesAdapter",
    "GeoapifyPlacesAdapter",
    "GooglePlacesAdapter",
    "HerePlacesAdapter",
    "build_http_client",
    "http_get_json",
]
