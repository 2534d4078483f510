"""Places port - the capability every place-search backend offers.

Implementations:
- adapters/places/google_adapter.py (GooglePlacesAdapter)
- adapters/places/geoapify_adapter.py (GeoapifyPlacesAdapter)
- adapters/places/here_adapter.py (HerePlacesAdapter)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Protocol

if TYPE_CHECKING:
    from ..domain.categories import CategoryMapper
    from ..domain.models import Coordinate, PlaceRecord, ProviderSelection


class PlacesProviderPort(Protocol):
    """Port for one vendor's place search.

    Failures (missing key, network, timeout, bad payload) never escape:
    they are logged and turn into an empty result. Only
    ``asyncio.CancelledError`` propagates, so a superseded request is
    never mistaken for "found nothing".

    Attributes:
        selection: Which backend this is
        category_mapper: Label-to-code table in this backend's vocabulary
    """

    selection: ProviderSelection
    category_mapper: CategoryMapper

    async def search(
        self,
        query: str,
        coordinate: Coordinate,
        category: Optional[str] = None,
    ) -> List[PlaceRecord]:
        """Search places around a coordinate.

        Args:
            query: Free text, may be empty for a pure category browse.
            coordinate: Search origin. The (0, 0) sentinel yields [] and
                no request is made.
            category: Provider category code overriding the mapper.

        Returns:
            Normalized places, possibly empty.
        """
        ...

    async def autocomplete(self, query: str) -> List[str]:
        """Return place/address suggestions for raw input."""
        ...

    async def place_details(self, place_id: str) -> Optional[PlaceRecord]:
        """Fetch richer data for a ``provider_place_id``.

        Returns:
            The detailed record, or None when the backend has no details
            call or the lookup failed.
        """
        ...
