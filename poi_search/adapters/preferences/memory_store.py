"""In-memory preference store.

Seeded from configuration at startup; changes live for the lifetime of
the process. Persisting settings belongs to the host application.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

from ...config import AppConfig, get_config
from ...domain.models import ProviderSelection
from ...observable import ObservableValue


@dataclass
class InMemoryPreferencesStore:
    """PreferencesPort backed by ObservableValues.

    Attributes:
        provider: Active backend
        use_device_location: Use the device fix instead of default_location
        default_location: Free-text location geocoded when the device is off
        search_radius_miles: Search radius before per-provider clamping
        open_now: Only return places that are currently open
        api_keys: Credential per backend
    """

    provider: ObservableValue[ProviderSelection] = field(
        default_factory=lambda: ObservableValue(
            ProviderSelection.GOOGLE_PLACES, name="provider"
        )
    )
    use_device_location: ObservableValue[bool] = field(
        default_factory=lambda: ObservableValue(True, name="use_device_location")
    )
    default_location: ObservableValue[Optional[str]] = field(
        default_factory=lambda: ObservableValue(None, name="default_location")
    )
    search_radius_miles: ObservableValue[int] = field(
        default_factory=lambda: ObservableValue(10, name="search_radius_miles")
    )
    open_now: ObservableValue[bool] = field(
        default_factory=lambda: ObservableValue(False, name="open_now")
    )

    api_keys: Dict[ProviderSelection, str] = field(default_factory=dict, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    @classmethod
    def from_config(cls, config: Optional[AppConfig] = None) -> InMemoryPreferencesStore:
        """Build a store seeded with configured defaults and API keys."""
        config = config or get_config()
        store = cls(
            provider=ObservableValue(config.providers.default, name="provider"),
            use_device_location=ObservableValue(
                config.search.use_device_location, name="use_device_location"
            ),
            default_location=ObservableValue(
                config.search.default_location, name="default_location"
            ),
            search_radius_miles=ObservableValue(
                config.search.default_radius_miles, name="search_radius_miles"
            ),
            open_now=ObservableValue(config.search.open_now, name="open_now"),
        )
        for selection in ProviderSelection:
            key = config.providers.api_key_for(selection)
            if key:
                store.api_keys[selection] = key
        return store

    async def api_key(self, selection: ProviderSelection) -> Optional[str]:
        return self.api_keys.get(selection)

    async def save_provider(self, selection: ProviderSelection) -> None:
        if self.provider.set(selection):
            self._logger.info("Provider changed", extra={"provider": selection.value})

    async def save_use_device_location(self, enabled: bool) -> None:
        self.use_device_location.set(enabled)

    async def save_default_location(self, location: Optional[str]) -> None:
        cleaned = location.strip() if location else None
        self.default_location.set(cleaned or None)

    async def save_search_radius(self, miles: int) -> None:
        if miles < 1:
            raise ValueError(f"Search radius must be at least 1 mile, got {miles}")
        self.search_radius_miles.set(miles)

    async def save_open_now(self, enabled: bool) -> None:
        self.open_now.set(enabled)

    async def save_api_key(
        self, selection: ProviderSelection, key: Optional[str]
    ) -> None:
        if key and key.strip():
            self.api_keys[selection] = key.strip()
        else:
            self.api_keys.pop(selection, None)
        # Never log the key itself.
        self._logger.info(
            "API key updated",
            extra={"provider": selection.value, "configured": selection in self.api_keys},
        )
