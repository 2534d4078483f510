"""Preferences port - user settings the search layer reacts to.

Every preference is exposed as an ObservableValue so the coordinator and
the location resolver can subscribe to changes. Writes are async to
leave room for a persistent store.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Protocol

if TYPE_CHECKING:
    from ..domain.models import ProviderSelection
    from ..observable import ObservableValue


class PreferencesPort(Protocol):
    """Port for the user preference store.

    Implementation: adapters/preferences/memory_store.py
    """

    provider: ObservableValue[ProviderSelection]
    use_device_location: ObservableValue[bool]
    default_location: ObservableValue[Optional[str]]
    search_radius_miles: ObservableValue[int]
    open_now: ObservableValue[bool]

    async def api_key(self, selection: ProviderSelection) -> Optional[str]:
        """Return the credential for a backend, or None if unset."""
        ...

    async def save_provider(self, selection: ProviderSelection) -> None: ...

    async def save_use_device_location(self, enabled: bool) -> None: ...

    async def save_default_location(self, location: Optional[str]) -> None: ...

    async def save_search_radius(self, miles: int) -> None: ...

    async def save_open_now(self, enabled: bool) -> None: ...

    async def save_api_key(
        self, selection: ProviderSelection, key: Optional[str]
    ) -> None: ...
