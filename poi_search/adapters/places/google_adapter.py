"""Google Places (legacy web service) adapter.

Endpoints:
- place/textsearch/json: text or type search biased to a circle
- place/details/json: phone, weekday hours and website
- place/autocomplete/json: prediction strings

Google reports application errors in a ``status`` field with HTTP 200,
so statuses are checked after every call.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ...domain.errors import ConfigurationError, ProviderError
from ...domain.models import Address, Coordinate, PlaceRecord, ProviderSelection
from .base import BasePlacesAdapter

TEXT_SEARCH_URL = "https://maps.googleapis.com/maps/api/place/textsearch/json"
DETAILS_URL = "https://maps.googleapis.com/maps/api/place/details/json"
AUTOCOMPLETE_URL = "https://maps.googleapis.com/maps/api/place/autocomplete/json"

DETAILS_FIELDS = (
    "name,formatted_address,formatted_phone_number,opening_hours,"
    "website,types,geometry,place_id"
)

_OK_STATUSES = frozenset({"OK", "ZERO_RESULTS"})
_AUTH_STATUSES = frozenset({"REQUEST_DENIED"})
_COUNTRY_RE = re.compile(r"[A-Za-z ]+")

ModelT = TypeVar("ModelT", bound=BaseModel)


class GoogleLatLng(BaseModel):
    lat: float
    lng: float


class GoogleGeometry(BaseModel):
    location: Optional[GoogleLatLng] = None


class GoogleOpeningHours(BaseModel):
    open_now: Optional[bool] = None
    weekday_text: List[str] = []


class GooglePlace(BaseModel):
    place_id: Optional[str] = None
    name: Optional[str] = None
    formatted_address: Optional[str] = None
    formatted_phone_number: Optional[str] = None
    international_phone_number: Optional[str] = None
    geometry: Optional[GoogleGeometry] = None
    opening_hours: Optional[GoogleOpeningHours] = None
    types: List[str] = []
    website: Optional[str] = None


class GoogleTextSearchResponse(BaseModel):
    status: str = "OK"
    error_message: Optional[str] = None
    results: List[GooglePlace] = []


class GoogleDetailsResponse(BaseModel):
    status: str = "OK"
    error_message: Optional[str] = None
    result: Optional[GooglePlace] = None


class GooglePrediction(BaseModel):
    description: Optional[str] = None


class GoogleAutocompleteResponse(BaseModel):
    status: str = "OK"
    error_message: Optional[str] = None
    predictions: List[GooglePrediction] = []


def parse_address(formatted: Optional[str]) -> Address:
    """Split a comma-separated US-style address into its parts.

    "1600 Amphitheatre Pkwy, Mountain View, CA 94043, USA" gives
    street, city, state "CA", zip "94043" and country "USA".
    """
    if not formatted or not formatted.strip():
        return Address()

    parts = [p.strip() for p in formatted.split(",")]
    street = parts[0]
    city = parts[1] if len(parts) > 1 else ""
    country = ""
    state = ""
    zip_code = ""

    if len(parts) > 2:
        if _COUNTRY_RE.fullmatch(parts[-1]):
            country = parts[-1]
            state_zip = parts[-2]
        else:
            state_zip = parts[-1]
        tokens = state_zip.split()
        digit_tokens = [t for t in tokens if any(ch.isdigit() for ch in t)]
        zip_code = digit_tokens[-1] if digit_tokens else ""
        state = " ".join(t for t in tokens if t != zip_code)

    return Address(street=street, city=city, state=state, zip_code=zip_code, country=country)


def format_phone_number(phone: str) -> str:
    """Render 10-digit and 1-prefixed 11-digit numbers as (AAA) BBB-CCCC.

    Anything else is returned unchanged.
    """
    digits = "".join(ch for ch in phone if ch.isdigit())
    if len(digits) == 11 and digits.startswith("1"):
        digits = digits[1:]
    if len(digits) == 10:
        return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"
    return phone


@dataclass
class GooglePlacesAdapter(BasePlacesAdapter):
    """PlacesProviderPort for Google Places.

    Text search results carry no phone or weekday hours; those come
    from :meth:`place_details`.
    """

    selection: ClassVar[ProviderSelection] = ProviderSelection.GOOGLE_PLACES
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
            "key": api_key,
            "location": f"{coordinate.latitude},{coordinate.longitude}",
            "radius": radius_m,
        }
        if text:
            params["query"] = text
        if category:
            params["type"] = category
        elif not text:
            params["type"] = "point_of_interest"
        if self.preferences.open_now.value:
            params["opennow"] = "true"

        response = self._parse(GoogleTextSearchResponse, await self._get(TEXT_SEARCH_URL, params))
        self._check_status(response.status, response.error_message)

        places = []
        for result in response.results[: self.config.result_limit]:
            place = self._to_place(result)
            if place is not None:
                places.append(place)
        return places

    async def _autocomplete(self, api_key: str, text: str) -> List[str]:
        response = self._parse(
            GoogleAutocompleteResponse,
            await self._get(AUTOCOMPLETE_URL, {"key": api_key, "input": text}),
        )
        self._check_status(response.status, response.error_message)
        return [p.description for p in response.predictions if p.description]

    async def _place_details(self, api_key: str, place_id: str) -> Optional[PlaceRecord]:
        response = self._parse(
            GoogleDetailsResponse,
            await self._get(
                DETAILS_URL,
                {"key": api_key, "place_id": place_id, "fields": DETAILS_FIELDS},
            ),
        )
        self._check_status(response.status, response.error_message)
        if response.result is None:
            return None
        return self._to_place(response.result)

    def _parse(self, model: Type[ModelT], payload: Dict[str, Any]) -> ModelT:
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            raise self._invalid_payload(e) from e

    def _check_status(self, status: str, error_message: Optional[str]) -> None:
        if status in _OK_STATUSES:
            return
        message = f"Google Places status {status}"
        if error_message:
            message = f"{message}: {error_message}"
        if status in _AUTH_STATUSES:
            raise ConfigurationError(message, setting_name="api_key", provider=self.provider_name)
        raise ProviderError(message, provider=self.provider_name)

    def _to_place(self, result: GooglePlace) -> Optional[PlaceRecord]:
        if not result.name or not result.name.strip():
            return None

        raw_phone = result.formatted_phone_number or result.international_phone_number
        coordinate = None
        if result.geometry and result.geometry.location:
            try:
                coordinate = Coordinate(
                    result.geometry.location.lat, result.geometry.location.lng
                )
            except ValueError:
                coordinate = None

        return PlaceRecord(
            name=result.name,
            address=parse_address(result.formatted_address),
            hours=tuple(result.opening_hours.weekday_text) if result.opening_hours else (),
            phone=format_phone_number(raw_phone) if raw_phone else None,
            description=", ".join(result.types),
            website=result.website,
            coordinate=coordinate,
            provider_place_id=result.place_id,
            provider=self.selection,
        )
