"""HERE Geocoding & Search adapter.

Category scoped or empty searches go to /browse, free text goes to
/discover. Both are bounded by a circle around the search origin.
HERE has no separate details call; search items already carry
contacts and opening hours.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, List, Optional

from pydantic import BaseModel, ValidationError

from ...domain.models import Address, Coordinate, PlaceRecord, ProviderSelection
from .base import BasePlacesAdapter

DISCOVER_URL = "https://discover.search.hereapi.com/v1/discover"
BROWSE_URL = "https://browse.search.hereapi.com/v1/browse"
AUTOCOMPLETE_URL = "https://autocomplete.search.hereapi.com/v1/autocomplete"

AUTOCOMPLETE_LIMIT = 5


class HereAddress(BaseModel):
    label: Optional[str] = None
    street: Optional[str] = None
    houseNumber: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postalCode: Optional[str] = None
    countryName: Optional[str] = None
    countryCode: Optional[str] = None


class HerePosition(BaseModel):
    lat: Optional[float] = None
    lng: Optional[float] = None


class HereContactValue(BaseModel):
    value: Optional[str] = None


class HereContacts(BaseModel):
    phone: List[HereContactValue] = []
    www: List[HereContactValue] = []


class HereCategory(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None


class HereOpeningHours(BaseModel):
    text: List[str] = []
    isOpen: Optional[bool] = None


class HereItem(BaseModel):
    id: Optional[str] = None
    title: Optional[str] = None
    address: Optional[HereAddress] = None
    position: Optional[HerePosition] = None
    contacts: List[HereContacts] = []
    categories: List[HereCategory] = []
    openingHours: List[HereOpeningHours] = []


class HereItemsResponse(BaseModel):
    items: List[HereItem] = []


@dataclass
class HerePlacesAdapter(BasePlacesAdapter):
    """PlacesProviderPort for HERE.

    With the open-now preference set, items whose first opening-hours
    block reports closed are dropped. Items without hours are kept.
    """

    selection: ClassVar[ProviderSelection] = ProviderSelection.HERE
    max_radius_m: ClassVar[int] = 50_000

    async def _search(
        self,
        api_key: str,
        text: str,
        coordinate: Coordinate,
        category: Optional[str],
        radius_m: int,
    ) -> List[PlaceRecord]:
        params = {
            "apiKey": api_key,
            "in": f"circle:{coordinate.latitude},{coordinate.longitude};r={radius_m}",
            "limit": self.config.result_limit,
        }
        if category is not None or not text:
            url = BROWSE_URL
            if category is not None:
                params["categories"] = category
            if text:
                params["name"] = text
        else:
            url = DISCOVER_URL
            params["q"] = text

        response = self._parse(await self._get(url, params))
        open_now = self.preferences.open_now.value
        self._logger.debug(
            "HERE items received",
            extra={"items": len(response.items), "endpoint": url, "open_now": open_now},
        )

        places = []
        for item in response.items:
            if open_now and self._is_closed(item):
                continue
            place = self._to_place(item)
            if place is not None:
                places.append(place)
        return places

    async def _autocomplete(self, api_key: str, text: str) -> List[str]:
        response = self._parse(
            await self._get(
                AUTOCOMPLETE_URL,
                {"apiKey": api_key, "q": text, "limit": AUTOCOMPLETE_LIMIT},
            )
        )
        suggestions = []
        for item in response.items:
            label = (item.address.label if item.address else None) or item.title
            if label:
                suggestions.append(label)
        return suggestions

    def _parse(self, payload: dict) -> HereItemsResponse:
        try:
            return HereItemsResponse.model_validate(payload)
        except ValidationError as e:
            raise self._invalid_payload(e) from e

    @staticmethod
    def _is_closed(item: HereItem) -> bool:
        if not item.openingHours:
            return False
        return item.openingHours[0].isOpen is False

    def _to_place(self, item: HereItem) -> Optional[PlaceRecord]:
        if not item.title or not item.title.strip():
            return None

        addr = item.address or HereAddress()
        contact = item.contacts[0] if item.contacts else HereContacts()
        phone = contact.phone[0].value if contact.phone else None
        website = contact.www[0].value if contact.www else None

        hours: List[str] = []
        for block in item.openingHours:
            for line in block.text:
                line = line.strip()
                if line and line not in hours:
                    hours.append(line)

        coordinate = None
        if item.position and item.position.lat is not None and item.position.lng is not None:
            try:
                coordinate = Coordinate(item.position.lat, item.position.lng)
            except ValueError:
                coordinate = None

        return PlaceRecord(
            name=item.title,
            address=Address(
                street=" ".join(p for p in (addr.street, addr.houseNumber) if p),
                city=addr.city or "",
                state=addr.state or "",
                zip_code=addr.postalCode or "",
                country=addr.countryName or addr.countryCode or "",
            ),
            hours=tuple(hours),
            phone=phone,
            description=", ".join(c.name for c in item.categories if c.name),
            website=website,
            coordinate=coordinate,
            provider=self.selection,
        )
