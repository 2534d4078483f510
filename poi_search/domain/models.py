"""Immutable domain models for POI search.

All models are frozen dataclasses with slots. They have no external
dependencies and are created by provider adapters from raw response
data, then handed unchanged to whichever layer displays them.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import Enum, auto
from typing import Optional, Sequence


class ProviderSelection(str, Enum):
    """Remote place-search backend currently in use."""

    GOOGLE_PLACES = "google_places"
    GEOAPIFY = "geoapify"
    HERE = "here"


class LocationState(Enum):
    """Lifecycle of the cached "current location"."""

    EMPTY = auto()
    RESOLVING = auto()
    RESOLVED = auto()


class SearchPhase(Enum):
    """Phase of the most recent search attempt of a coordinator."""

    IDLE = auto()
    DEBOUNCING = auto()
    IN_FLIGHT = auto()
    PUBLISHED = auto()
    CANCELLED = auto()
    FAILED = auto()


@dataclass(frozen=True, slots=True)
class Coordinate:
    """GPS coordinates of a search origin or a place.

    ``(0.0, 0.0)`` is reserved to mean "no location"; see
    :data:`INVALID_COORDINATE`.
    """

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        """Validate coordinate ranges."""
        if not (math.isfinite(self.latitude) and math.isfinite(self.longitude)):
            raise ValueError(
                f"Coordinates must be finite, got ({self.latitude}, {self.longitude})"
            )
        if not -90 <= self.latitude <= 90:
            raise ValueError(
                f"Latitude must be between -90 and 90, got {self.latitude}"
            )
        if not -180 <= self.longitude <= 180:
            raise ValueError(
                f"Longitude must be between -180 and 180, got {self.longitude}"
            )

    @property
    def is_valid(self) -> bool:
        """False for the (0, 0) sentinel."""
        return not (self.latitude == 0.0 and self.longitude == 0.0)


INVALID_COORDINATE = Coordinate(0.0, 0.0)


@dataclass(frozen=True, slots=True)
class Address:
    """Structured postal address. Missing parts are empty strings."""

    street: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    country: str = ""

    @property
    def formatted(self) -> str:
        """Single-line rendering, skipping empty parts."""
        state_zip = " ".join(p for p in (self.state, self.zip_code) if p)
        parts = [self.street, self.city, state_zip, self.country]
        return ", ".join(p for p in parts if p)


@dataclass(frozen=True, slots=True)
class PlaceRecord:
    """A normalized point of interest.

    Attributes:
        name: Display name (never empty)
        address: Structured address, always present
        hours: Free-text opening hours lines
        phone: Phone number if the provider returned one
        description: Provider categories joined for display
        website: Website URL if known
        coordinate: Position of the place if known
        provider_place_id: Identifier for a place-details follow-up call
        provider: Backend that produced the record
    """

    name: str
    address: Address = field(default_factory=Address)
    hours: tuple[str, ...] = field(default_factory=tuple)
    phone: Optional[str] = None
    description: str = ""
    website: Optional[str] = None
    coordinate: Optional[Coordinate] = None
    provider_place_id: Optional[str] = None
    provider: Optional[ProviderSelection] = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("PlaceRecord name must not be empty")

    def matches_text(self, needle: str) -> bool:
        """Case-insensitive substring match on name or description."""
        folded = needle.strip().casefold()
        return folded in self.name.casefold() or folded in self.description.casefold()

    def with_details(
        self, phone: Optional[str] = None, hours: Sequence[str] = ()
    ) -> PlaceRecord:
        """Return a copy enriched with place-details data.

        A blank phone or an empty hours list keeps the current value.
        """
        return replace(
            self,
            phone=phone if phone and phone.strip() else self.phone,
            hours=tuple(hours) if hours else self.hours,
        )


@dataclass(frozen=True, slots=True)
class SearchRequest:
    """One search attempt as dispatched to a provider."""

    query_text: str
    coordinate: Coordinate
    category: Optional[str] = None

    @property
    def has_location(self) -> bool:
        return self.coordinate.is_valid
