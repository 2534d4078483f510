"""Mapping of human-facing category labels to provider category codes.

Matching is exact on trimmed, case-folded input so that free-form
searches like "restaurants in springfield" stay text queries instead of
being scoped to a category filter.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

from .models import ProviderSelection


@dataclass(frozen=True, slots=True)
class CategoryMapping:
    """One label set and the provider code it resolves to."""

    labels: frozenset[str]
    code: str


@dataclass(frozen=True, slots=True)
class TopLevelCategory:
    """A broad provider category a search can be scoped to."""

    key: str
    label: str


# Shortcut labels offered on the landing screen.
LANDING_CATEGORIES: tuple[str, ...] = (
    "Gas Stations",
    "Restaurants",
    "Entertainment",
    "Coffee",
    "Shopping",
    "Hotels",
)

_CONCEPT_LABELS: Dict[str, frozenset[str]] = {
    "fuel": frozenset({"gas stations", "gas station", "fuel"}),
    "restaurants": frozenset({"restaurants", "restaurant", "food"}),
    "entertainment": frozenset({"entertainment"}),
    "coffee": frozenset({"coffee", "coffee shops", "coffee shop", "cafe", "cafes"}),
    "shopping": frozenset({"shopping", "shops", "store", "stores"}),
    "hotels": frozenset({"hotels", "hotel", "lodging"}),
}

_VOCABULARIES: Dict[ProviderSelection, Dict[str, str]] = {
    ProviderSelection.GEOAPIFY: {
        "fuel": "commercial.gas,service.vehicle.fuel",
        "restaurants": "catering.restaurant",
        "entertainment": "entertainment",
        "coffee": "catering.cafe",
        "shopping": "commercial",
        "hotels": "accommodation.hotel",
    },
    ProviderSelection.HERE: {
        "fuel": "700-7600-0116",
        "restaurants": "100-1000",
        "entertainment": "200",
        "coffee": "100-1100",
        "shopping": "600",
        "hotels": "500-5000",
    },
    ProviderSelection.GOOGLE_PLACES: {
        "fuel": "gas_station",
        "restaurants": "restaurant",
        "entertainment": "movie_theater",
        "coffee": "cafe",
        "shopping": "store",
        "hotels": "lodging",
    },
}

_TOP_LEVEL: Dict[ProviderSelection, tuple[TopLevelCategory, ...]] = {
    ProviderSelection.GEOAPIFY: (
        TopLevelCategory("catering", "Food & drinks"),
        TopLevelCategory("commercial", "Shopping & commerce"),
        TopLevelCategory("service", "Services"),
        TopLevelCategory("entertainment", "Entertainment"),
        TopLevelCategory("leisure", "Leisure & recreation"),
        TopLevelCategory("accommodation", "Accommodation"),
        TopLevelCategory("amenity", "Amenities"),
    ),
    ProviderSelection.HERE: (
        TopLevelCategory("100", "Eat & drink"),
        TopLevelCategory("200", "Going out & entertainment"),
        TopLevelCategory("300", "Sights & museums"),
        TopLevelCategory("500", "Accommodation"),
        TopLevelCategory("550", "Leisure & outdoor"),
        TopLevelCategory("600", "Shopping"),
        TopLevelCategory("700", "Business & services"),
    ),
    ProviderSelection.GOOGLE_PLACES: (
        TopLevelCategory("restaurant", "Restaurants"),
        TopLevelCategory("store", "Stores"),
        TopLevelCategory("tourist_attraction", "Attractions"),
        TopLevelCategory("lodging", "Lodging"),
        TopLevelCategory("gas_station", "Gas stations"),
    ),
}


def normalize_label(text: str) -> str:
    return text.strip().casefold()


@dataclass(frozen=True)
class CategoryMapper:
    """Exact label lookup for one provider's category vocabulary.

    Example:
        mapper = CategoryMapper.for_provider(ProviderSelection.GEOAPIFY)
        mapper.map("Restaurants")            # "catering.restaurant"
        mapper.map("restaurants near me")    # None
    """

    mappings: tuple[CategoryMapping, ...]
    top_level: tuple[TopLevelCategory, ...] = field(default_factory=tuple)

    def map(self, query: str) -> Optional[str]:
        """Return the category code for an exact label hit, else None."""
        normalized = normalize_label(query)
        if not normalized:
            return None
        for mapping in self.mappings:
            if normalized in mapping.labels:
                return mapping.code
        return None

    def is_known_code(self, code: str) -> bool:
        """Whether ``code`` belongs to this vocabulary (mapped or top-level)."""
        return any(m.code == code for m in self.mappings) or any(
            c.key == code for c in self.top_level
        )

    @classmethod
    def for_provider(cls, selection: ProviderSelection) -> CategoryMapper:
        vocabulary = _VOCABULARIES[selection]
        mappings = tuple(
            CategoryMapping(labels=labels, code=vocabulary[concept])
            for concept, labels in _CONCEPT_LABELS.items()
        )
        return cls(mappings=mappings, top_level=_TOP_LEVEL[selection])
