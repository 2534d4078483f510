"""Services layer - orchestration over the ports."""

from .debounce import Debouncer
from .location_resolver import LocationResolver
from .search_coordinator import SearchCoordinator

__all__ = ["Debouncer", "LocationResolver", "SearchCoordinator"]
