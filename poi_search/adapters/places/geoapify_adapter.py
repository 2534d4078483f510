"""Geoapify Places adapter.

Endpoints:
- /v2/places: category and proximity search
- /v2/place-details: phone, opening hours and website for one place
- /v1/geocode/autocomplete: address suggestions
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, List, Optional

from pydantic import BaseModel, ValidationError

from ...domain.models import Address, Coordinate, PlaceRecord, ProviderSelection
from .base import BasePlacesAdapter

PLACES_URL = "https://api.geoapify.com/v2/places"
PLACE_DETAILS_URL = "https://api.geoapify.com/v2/place-details"
AUTOCOMPLETE_URL = "https://api.geoapify.com/v1/geocode/autocomplete"

# Broad set used for free-text searches that map to no category.
DEFAULT_CATEGORIES = (
    "catering,commercial,service,entertainment,leisure,accommodation,amenity"
)


class GeoapifyContact(BaseModel):
    phone: Optional[str] = None


class GeoapifyProperties(BaseModel):
    name: Optional[str] = None
    street: Optional[str] = None
    housenumber: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postcode: Optional[str] = None
    country: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    categories: Optional[List[str]] = None
    place_id: Optional[str] = None
    opening_hours: Optional[str] = None
    contact: Optional[GeoapifyContact] = None
    formatted: Optional[str] = None


class GeoapifyGeometry(BaseModel):
    coordinates: List[float] = []


class GeoapifyFeature(BaseModel):
    properties: GeoapifyProperties
    geometry: Optional[GeoapifyGeometry] = None


class GeoapifyFeatureCollection(BaseModel):
    features: List[GeoapifyFeature] = []


@dataclass
class GeoapifyPlacesAdapter(BasePlacesAdapter):
    """PlacesProviderPort for Geoapify.

    Ignores the open-now preference; the places endpoint has no such
    filter.
    """

    selection: ClassVar[ProviderSelection] = ProviderSelection.GEOAPIFY
    max_radius_m: ClassVar[int] = 10_000

    async def _search(
        self,
        api_key: str,
        text: str,
        coordinate: Coordinate,
        category: Optional[str],
        radius_m: int,
    ) -> List[PlaceRecord]:
        lon, lat = coordinate.longitude, coordinate.latitude
        params = {
            "apiKey": api_key,
            "categories": category or DEFAULT_CATEGORIES,
            "limit": self.config.result_limit,
            "filter": f"circle:{lon},{lat},{radius_m}",
            "bias": f"proximity:{lon},{lat}",
        }
        if text and category is None:
            params["name"] = text

        collection = self._parse(await self._get(PLACES_URL, params))
        self._logger.debug(
            "Geoapify features received",
            extra={"features": len(collection.features)},
        )
        return [
            place
            for place in (self._to_place(feature) for feature in collection.features)
            if place is not None
        ]

    async def _autocomplete(self, api_key: str, text: str) -> List[str]:
        collection = self._parse(
            await self._get(AUTOCOMPLETE_URL, {"apiKey": api_key, "text": text})
        )
        return [f.properties.formatted for f in collection.features if f.properties.formatted]

    async def _place_details(self, api_key: str, place_id: str) -> Optional[PlaceRecord]:
        collection = self._parse(
            await self._get(PLACE_DETAILS_URL, {"apiKey": api_key, "id": place_id})
        )
        if not collection.features:
            return None
        return self._to_place(collection.features[0])

    def _parse(self, payload: dict) -> GeoapifyFeatureCollection:
        try:
            return GeoapifyFeatureCollection.model_validate(payload)
        except ValidationError as e:
            raise self._invalid_payload(e) from e

    def _to_place(self, feature: GeoapifyFeature) -> Optional[PlaceRecord]:
        props = feature.properties
        name = props.name or props.street
        if not name or not name.strip():
            return None

        street = " ".join(p for p in (props.street, props.housenumber) if p)
        phone = props.contact.phone if props.contact and props.contact.phone else props.phone
        hours = (
            tuple(h.strip() for h in props.opening_hours.split(";") if h.strip())
            if props.opening_hours
            else ()
        )

        coordinate = None
        if feature.geometry and len(feature.geometry.coordinates) >= 2:
            lon, lat = feature.geometry.coordinates[0], feature.geometry.coordinates[1]
            try:
                coordinate = Coordinate(latitude=lat, longitude=lon)
            except ValueError:
                coordinate = None

        return PlaceRecord(
            name=name,
            address=Address(
                street=street,
                city=props.city or "",
                state=props.state or "",
                zip_code=props.postcode or "",
                country=props.country or "",
            ),
            hours=hours,
            phone=phone,
            description=", ".join(props.categories or ()),
            website=props.website,
            coordinate=coordinate,
            provider_place_id=props.place_id,
            provider=self.selection,
        )
