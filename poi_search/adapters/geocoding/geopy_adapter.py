"""geopy-backed geocoder adapter for the backends geopy supports.

Each backend geocodes with its own vendor so that a default location is
interpreted the same way the searches around it will be:
- Google Places -> geopy GoogleV3
- HERE -> geopy HereV7

Geoapify has no geopy geocoder; see geoapify_adapter.py.

geopy is synchronous; calls run in a worker thread through
``asyncio.to_thread`` and are rate limited with geopy's RateLimiter.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Tuple

from geopy.exc import (
    GeocoderAuthenticationFailure,
    GeocoderInsufficientPrivileges,
    GeocoderTimedOut,
    GeocoderUnavailable,
    GeopyError,
)
from geopy.extra.rate_limiter import RateLimiter
from geopy.geocoders import GoogleV3, HereV7

from ...config import GeocodingConfig, get_config
from ...domain.models import Coordinate, ProviderSelection
from ...ports.cache import CachePort
from ...ports.preferences import PreferencesPort
from ..cache.memory_cache import InMemoryCache

GeocoderFactory = Callable[[str, int], Any]

_FACTORIES: Dict[ProviderSelection, GeocoderFactory] = {
    ProviderSelection.GOOGLE_PLACES: lambda key, timeout: GoogleV3(api_key=key, timeout=timeout),
    ProviderSelection.HERE: lambda key, timeout: HereV7(apikey=key, timeout=timeout),
}


@dataclass
class GeopyGeocoderAdapter:
    """GeocoderPort implementation over a geopy geocoder.

    The geopy client is built lazily from the backend's API key and
    rebuilt when the key changes. Only successful forward lookups are
    cached, so an address that failed during an outage is retried on the
    next resolution.

    Attributes:
        selection: Backend whose geocoding service is used
        preferences: Source of the API key
        config: Geocoding configuration
        cache: Cache for forward geocoding results
    """

    selection: ProviderSelection
    preferences: PreferencesPort
    config: GeocodingConfig = field(default_factory=lambda: get_config().geocoding)
    cache: CachePort = field(default_factory=lambda: InMemoryCache(name="geocode"))

    _clients: Optional[Tuple[str, Any, Any]] = field(default=None, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.selection not in _FACTORIES:
            raise ValueError(f"geopy has no geocoder for {self.selection.value}")
        self._logger = logging.getLogger(__name__)

    def _get_geocoder(self, api_key: str) -> Tuple[Any, Any]:
        """Get or initialize the rate-limited geocode/reverse callables."""
        if self._clients is not None and self._clients[0] == api_key:
            return self._clients[1], self._clients[2]

        self._logger.debug(
            "Initializing geocoder",
            extra={"provider": self.selection.value, "timeout": self.config.timeout_seconds},
        )
        geolocator = _FACTORIES[self.selection](api_key, self.config.timeout_seconds)
        limiter_options = dict(
            min_delay_seconds=self.config.rate_limit_delay,
            max_retries=self.config.max_retries,
            error_wait_seconds=self.config.error_wait_seconds,
            swallow_exceptions=False,
        )
        geocode_fn = RateLimiter(geolocator.geocode, **limiter_options)
        reverse_fn = RateLimiter(geolocator.reverse, **limiter_options)
        self._clients = (api_key, geocode_fn, reverse_fn)
        return geocode_fn, reverse_fn

    def _cache_key(self, address: str) -> str:
        return f"{self.selection.value}:{address.strip().lower()}"

    async def geocode(self, address: str) -> Optional[Coordinate]:
        """Forward geocode an address.

        Args:
            address: Free-text address, city or postal code.

        Returns:
            Coordinate of the best match, or None if not found or the
            lookup failed.
        """
        if not address or not address.strip():
            return None

        cache_key = self._cache_key(address)
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

        try:
            geocode_fn, _ = self._get_geocoder(api_key)
            location = await asyncio.to_thread(geocode_fn, address.strip())

            if location is None:
                self._logger.debug(
                    "Geocode returned no result",
                    extra={"address": address, "provider": self.selection.value},
                )
                return None

            coordinate = Coordinate(
                latitude=float(location.latitude),
                longitude=float(location.longitude),
            )
            self._logger.debug(
                "Geocode success",
                extra={"address": address, "provider": self.selection.value},
            )
            self.cache.set(cache_key, coordinate, ttl=self.config.cache_ttl_seconds)
            return coordinate

        except (GeocoderAuthenticationFailure, GeocoderInsufficientPrivileges) as e:
            self._logger.error(
                "Geocoder rejected API key",
                extra={"provider": self.selection.value, "error": str(e)},
            )
            return None
        except (GeocoderTimedOut, GeocoderUnavailable) as e:
            self._logger.warning(
                "Geocode service error",
                extra={"address": address, "provider": self.selection.value, "error": str(e)},
            )
            return None
        except GeopyError as e:
            self._logger.warning(
                "Geocode failed",
                extra={"address": address, "provider": self.selection.value, "error": str(e)},
            )
            return None
        except Exception as e:
            self._logger.error(
                "Geocode unexpected error",
                extra={"address": address, "provider": self.selection.value, "error": str(e)},
            )
            return None

    async def reverse_geocode(self, coordinate: Coordinate) -> Optional[str]:
        """Reverse geocode coordinates to a formatted address.

        Returns:
            The address label, or None if not found or the lookup failed.
        """
        if not coordinate.is_valid:
            return None

        api_key = await self.preferences.api_key(self.selection)
        if not api_key:
            return None

        try:
            _, reverse_fn = self._get_geocoder(api_key)
            location = await asyncio.to_thread(
                reverse_fn, (coordinate.latitude, coordinate.longitude)
            )
            if location is None or not location.address:
                return None
            return str(location.address)

        except (GeocoderTimedOut, GeocoderUnavailable) as e:
            self._logger.warning(
                "Reverse geocode service error",
                extra={"provider": self.selection.value, "error": str(e)},
            )
            return None
        except Exception as e:
            self._logger.error(
                "Reverse geocode unexpected error",
                extra={"provider": self.selection.value, "error": str(e)},
            )
            return None
