"""Domain layer - models, errors and category vocabularies."""

from .categories import LANDING_CATEGORIES, CategoryMapper, CategoryMapping, TopLevelCategory
from .errors import (
    ConfigurationError,
    LocationPermissionError,
    PoiSearchError,
    ProviderError,
)
from .models import (
    INVALID_COORDINATE,
    Address,
    Coordinate,
    LocationState,
    PlaceRecord,
    ProviderSelection,
    SearchPhase,
    SearchRequest,
)

__all__ = [
    # Models
    "Address",
    "Coordinate",
    "INVALID_COORDINATE",
    "LocationState",
    "PlaceRecord",
    "ProviderSelection",
    "SearchPhase",
    "SearchRequest",
    # Categories
    "CategoryMapper",
    "CategoryMapping",
    "TopLevelCategory",
    "LANDING_CATEGORIES",
    # Errors
    "PoiSearchError",
    "ConfigurationError",
    "ProviderError",
    "LocationPermissionError",
]
