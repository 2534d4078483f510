"""Shared fixtures and fakes for the POI search tests."""

import asyncio
import os
import sys
from typing import Dict, List, Optional

import httpx
import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from poi_search.adapters.location import StaticLocationSource
from poi_search.adapters.preferences import InMemoryPreferencesStore
from poi_search.config import SearchConfig, reset_config
from poi_search.domain.categories import CategoryMapper
from poi_search.domain.errors import LocationPermissionError
from poi_search.domain.models import Coordinate, PlaceRecord, ProviderSelection

PASADENA = Coordinate(34.1478, -118.1445)
SPRINGFIELD = Coordinate(39.7817, -89.6501)


class FakeProvider:
    """PlacesProviderPort double recording every call.

    ``results`` maps query text to records; ``gates`` maps query text to
    an asyncio.Event the search waits on before returning.
    """

    def __init__(self, selection: ProviderSelection = ProviderSelection.GEOAPIFY):
        self.selection = selection
        self.category_mapper = CategoryMapper.for_provider(selection)
        self.results: Dict[str, List[PlaceRecord]] = {}
        self.gates: Dict[str, asyncio.Event] = {}
        self.suggestions: Dict[str, List[str]] = {}
        self.details: Dict[str, PlaceRecord] = {}
        self.calls: List[tuple] = []
        self.autocomplete_calls: List[str] = []
        self.cancelled: List[str] = []

    async def search(self, query, coordinate, category=None):
        self.calls.append((query, coordinate, category))
        gate = self.gates.get(query)
        if gate is not None:
            try:
                await gate.wait()
            except asyncio.CancelledError:
                self.cancelled.append(query)
                raise
        return list(self.results.get(query, []))

    async def autocomplete(self, query):
        self.autocomplete_calls.append(query)
        return list(self.suggestions.get(query, []))

    async def place_details(self, place_id):
        return self.details.get(place_id)


class FakeGeocoder:
    """GeocoderPort double with optional gate and call counting."""

    def __init__(self, coordinates: Optional[Dict[str, Coordinate]] = None):
        self.coordinates = coordinates or {}
        self.addresses: Dict[Coordinate, str] = {}
        self.gate: Optional[asyncio.Event] = None
        self.geocode_calls: List[str] = []

    async def geocode(self, address):
        self.geocode_calls.append(address)
        if self.gate is not None:
            await self.gate.wait()
        return self.coordinates.get(address)

    async def reverse_geocode(self, coordinate):
        return self.addresses.get(coordinate)


class GatedLocationSource(StaticLocationSource):
    """StaticLocationSource whose lookups block until ``gate`` is set."""

    def __init__(self, coordinate=None, permission_granted=True):
        super().__init__(coordinate=coordinate, permission_granted=permission_granted)
        self.gate = asyncio.Event()

    async def get_current_location(self):
        self.lookups += 1
        await self.gate.wait()
        if not self.permission_granted:
            raise LocationPermissionError("Location permission not granted")
        return self.coordinate


def make_place(name: str, description: str = "", **kwargs) -> PlaceRecord:
    return PlaceRecord(name=name, description=description, **kwargs)


@pytest.fixture(autouse=True)
def _fresh_config(monkeypatch):
    """Isolate tests from POI_* variables of the developer's shell."""
    for key in list(os.environ):
        if key.startswith("POI_"):
            monkeypatch.delenv(key, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def preferences():
    """Preference store with keys for every backend."""
    return InMemoryPreferencesStore(
        api_keys={
            ProviderSelection.GOOGLE_PLACES: "google-key",
            ProviderSelection.GEOAPIFY: "geoapify-key",
            ProviderSelection.HERE: "here-key",
        }
    )


@pytest.fixture
def search_config():
    return SearchConfig(debounce_seconds=0.05)


@pytest.fixture
def recorder():
    """Collects requests seen by a MockTransport."""

    class Recorder:
        def __init__(self):
            self.requests: List[httpx.Request] = []

        def transport(self, handler):
            def wrapped(request):
                self.requests.append(request)
                return handler(request)

            return httpx.MockTransport(wrapped)

    return Recorder()
