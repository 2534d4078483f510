"""Geocoding port - address to coordinate and back.

This protocol defines the contract for geocoding services, allowing
each place-search backend to bring its own geocoder.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Protocol

if TYPE_CHECKING:
    from ..domain.models import Coordinate


class GeocoderPort(Protocol):
    """Port for geocoding services.

    Implementation: adapters/geocoding/geopy_adapter.py

    Failures are recovered inside the adapter and reported as None.
    """

    async def geocode(self, address: str) -> Optional[Coordinate]:
        """Forward geocode a free-text address or place name.

        Args:
            address: e.g. "Pasadena, CA" or "91101".

        Returns:
            The best matching coordinate, or None if not found.
        """
        ...

    async def reverse_geocode(self, coordinate: Coordinate) -> Optional[str]:
        """Reverse geocode a coordinate to a formatted address.

        Returns:
            The address label, or None if not found.
        """
        ...
