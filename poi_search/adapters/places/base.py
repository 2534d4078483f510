"""Behaviour shared by every place-search adapter.

Subclasses only know their vendor: endpoints, parameters and response
shapes. The guard rails (credential check, sentinel coordinate, radius
clamp, failure recovery and the client-side text filter) live here so
that every backend applies them the same way.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Optional

import httpx

from ...config import ProvidersConfig, get_config
from ...domain.categories import CategoryMapper
from ...domain.errors import ConfigurationError, ProviderError
from ...domain.models import Coordinate, PlaceRecord, ProviderSelection
from ...ports.preferences import PreferencesPort
from .http import http_get_json

METERS_PER_MILE = 1609.34


@dataclass
class BasePlacesAdapter:
    """Template for PlacesProviderPort implementations.

    Attributes:
        preferences: Source of API keys, radius and open-now flag
        client: Shared AsyncClient
        config: Provider settings (result limit)
        category_mapper: Vocabulary of this backend
    """

    selection: ClassVar[ProviderSelection]
    max_radius_m: ClassVar[int]

    preferences: PreferencesPort
    client: httpx.AsyncClient
    config: ProvidersConfig = field(default_factory=lambda: get_config().providers)
    category_mapper: CategoryMapper = field(init=False)

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.category_mapper = CategoryMapper.for_provider(self.selection)
        self._logger = logging.getLogger(type(self).__module__)

    @property
    def provider_name(self) -> str:
        return self.selection.value

    def radius_meters(self) -> int:
        """Configured radius converted to meters, clamped for this backend."""
        miles = self.preferences.search_radius_miles.value
        return min(int(miles * METERS_PER_MILE), self.max_radius_m)

    async def search(
        self,
        query: str,
        coordinate: Coordinate,
        category: Optional[str] = None,
    ) -> List[PlaceRecord]:
        if not coordinate.is_valid:
            self._logger.warning(
                "Refusing search without a location",
                extra={"provider": self.provider_name},
            )
            return []

        api_key = await self.preferences.api_key(self.selection)
        if not api_key:
            self._logger.error(
                "API key not configured", extra={"provider": self.provider_name}
            )
            return []

        text = query.strip()
        resolved_category = category or self.category_mapper.map(text)
        radius_m = self.radius_meters()

        self._logger.debug(
            "Searching places",
            extra={
                "provider": self.provider_name,
                "query": text,
                "category": resolved_category,
                "radius_m": radius_m,
            },
        )

        places = await self._guarded(
            "search",
            self._search(api_key, text, coordinate, resolved_category, radius_m),
            default=[],
        )

        if resolved_category is None and text:
            places = [place for place in places if place.matches_text(text)]

        self._logger.info(
            "Search complete",
            extra={"provider": self.provider_name, "results": len(places)},
        )
        return places

    async def autocomplete(self, query: str) -> List[str]:
        text = query.strip()
        if not text:
            return []
        api_key = await self.preferences.api_key(self.selection)
        if not api_key:
            self._logger.debug(
                "Autocomplete skipped, no API key",
                extra={"provider": self.provider_name},
            )
            return []
        return await self._guarded(
            "autocomplete", self._autocomplete(api_key, text), default=[]
        )

    async def place_details(self, place_id: str) -> Optional[PlaceRecord]:
        if not place_id:
            return None
        api_key = await self.preferences.api_key(self.selection)
        if not api_key:
            return None
        return await self._guarded(
            "place_details", self._place_details(api_key, place_id), default=None
        )

    async def _guarded(self, operation: str, call: Any, default: Any) -> Any:
        """Await a vendor call, turning failures into ``default``.

        ``asyncio.CancelledError`` is not an Exception subclass and
        passes through untouched.
        """
        try:
            return await call
        except ConfigurationError as e:
            self._logger.error(
                "Provider rejected configuration",
                extra={"provider": self.provider_name, "operation": operation, "error": str(e)},
            )
        except ProviderError as e:
            self._logger.warning(
                "Provider call failed",
                extra={
                    "provider": self.provider_name,
                    "operation": operation,
                    "error": str(e),
                    "timeout": e.is_timeout,
                },
            )
        except Exception as e:
            self._logger.error(
                "Provider unexpected error",
                extra={"provider": self.provider_name, "operation": operation, "error": str(e)},
            )
        return default

    async def _get(
        self, url: str, params: Dict[str, Any], headers: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        return await http_get_json(
            self.client, url, params, headers, provider=self.provider_name
        )

    def _invalid_payload(self, error: Exception) -> ProviderError:
        return ProviderError(
            "Unexpected response shape", cause=error, provider=self.provider_name
        )

    async def _search(
        self,
        api_key: str,
        text: str,
        coordinate: Coordinate,
        category: Optional[str],
        radius_m: int,
    ) -> List[PlaceRecord]:
        raise NotImplementedError

    async def _autocomplete(self, api_key: str, text: str) -> List[str]:
        raise NotImplementedError

    async def _place_details(self, api_key: str, place_id: str) -> Optional[PlaceRecord]:
        return None
