"""Geoapify geocoder over the shared httpx client.

geopy has no Geoapify geocoder, so this adapter calls the Geoapify
geocoding API directly:
- /v1/geocode/search: free text to the best matching coordinate
- /v1/geocode/reverse: coordinate to a formatted address
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import ClassVar, Optional

import httpx
from pydantic import ValidationError

from ...config import GeocodingConfig, get_config
from ...domain.errors import ConfigurationError, ProviderError
from ...domain.models import Coordinate, ProviderSelection
from ...ports.cache import CachePort
from ...ports.preferences import PreferencesPort
from ..cache.memory_cache import InMemoryCache
from ..places.geoapify_adapter import GeoapifyFeatureCollection
from ..places.http import http_get_json

SEARCH_URL = "https://api.geoapify.com/v1/geocode/search"
REVERSE_URL = "https://api.geoapify.com/v1/geocode/reverse"


@dataclass
class GeoapifyGeocoderAdapter:
    """GeocoderPort for Geoapify.

    Same recovery contract as GeopyGeocoderAdapter: every failure is
    logged and reported as None, and only successful forward lookups
    are cached.

    Attributes:
        preferences: Source of the API key
        client: Shared AsyncClient
        config: Geocoding configuration (cache TTL)
        cache: Cache for forward geocoding results
    """

    selection: ClassVar[ProviderSelection] = ProviderSelection.GEOAPIFY

    preferences: PreferencesPort
    client: httpx.AsyncClient
    config: GeocodingConfig = field(default_factory=lambda: get_config().geocoding)
    cache: CachePort = field(default_factory=lambda: InMemoryCache(name="geocode"))

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    async def geocode(self, address: str) -> Optional[Coordinate]:
        if not address or not address.strip():
            return None

        cache_key = f"{self.selection.value}:{address.strip().lower()}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            self._logger.debug("Geocode cache hit", extra={"address": address})
            return cached

        api_key = await self.preferences.api_key(self.selection)
        if not api_key:
            self._logger.warning(
                "Geocoding skipped, API key not configured",
                extra={"provider": self.selection.value},
            )
            return None

        params = {"apiKey": api_key, "text": address.strip(), "limit": 1}
        collection = await self._fetch(SEARCH_URL, params, "geocode")
        if collection is None:
            return None

        for feature in collection.features:
            coords = feature.geometry.coordinates if feature.geometry else []
            if len(coords) < 2:
                continue
            # GeoJSON order is longitude, latitude.
            coordinate = Coordinate(latitude=coords[1], longitude=coords[0])
            self.cache.set(cache_key, coordinate, ttl=self.config.cache_ttl_seconds)
            self._logger.debug("Geocode success", extra={"address": address})
            return coordinate

        self._logger.debug("Geocode returned no result", extra={"address": address})
        return None

    async def reverse_geocode(self, coordinate: Coordinate) -> Optional[str]:
        if not coordinate.is_valid:
            return None

        api_key = await self.preferences.api_key(self.selection)
        if not api_key:
            return None

        params = {
            "apiKey": api_key,
            "lat": coordinate.latitude,
            "lon": coordinate.longitude,
            "limit": 1,
        }
        collection = await self._fetch(REVERSE_URL, params, "reverse")
        if collection is None or not collection.features:
            return None
        return collection.features[0].properties.formatted or None

    async def _fetch(
        self, url: str, params: dict, operation: str
    ) -> Optional[GeoapifyFeatureCollection]:
        extra = {"provider": self.selection.value, "operation": operation}
        try:
            payload = await http_get_json(
                self.client, url, params, provider=self.selection.value
            )
            return GeoapifyFeatureCollection.model_validate(payload)
        except ConfigurationError as e:
            self._logger.error("Geocoder rejected API key", extra={**extra, "error": str(e)})
        except ProviderError as e:
            self._logger.warning("Geocode service error", extra={**extra, "error": str(e)})
        except ValidationError as e:
            self._logger.warning(
                "Geocode response malformed",
                extra={**extra, "error": e.error_count()},
            )
        return None
