"""Device location port."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Protocol

if TYPE_CHECKING:
    from ..domain.models import Coordinate


class DeviceLocationSourcePort(Protocol):
    """Port for the platform's location service.

    Implementation: adapters/location/static_source.py
    """

    async def get_current_location(self) -> Optional[Coordinate]:
        """Return the last known device position.

        Returns:
            The position, or None if the device has no fix.

        Raises:
            LocationPermissionError: If location access is denied.
        """
        ...

    def start_updates(self) -> None:
        """Begin receiving location updates."""
        ...

    def stop_updates(self) -> None:
        """Stop receiving location updates."""
        ...
