"""Tests for the Geoapify geocoder adapter."""

import asyncio

import httpx

from conftest import PASADENA
from poi_search.adapters.cache import InMemoryCache
from poi_search.adapters.geocoding import GeoapifyGeocoderAdapter
from poi_search.config import GeocodingConfig
from poi_search.domain.models import INVALID_COORDINATE, Coordinate

RESULT = {
    "type": "FeatureCollection",
    "features": [
        {
            "type": "Feature",
            "properties": {"formatted": "100 Colorado Blvd, Pasadena, CA 91101, United States"},
            "geometry": {"type": "Point", "coordinates": [-118.1445, 34.1478]},
        }
    ],
}


def run_geocoder(preferences, recorder, handler, call, cache=None):
    async def run():
        async with httpx.AsyncClient(transport=recorder.transport(handler)) as client:
            adapter = GeoapifyGeocoderAdapter(
                preferences=preferences,
                client=client,
                config=GeocodingConfig(),
                cache=cache if cache is not None else InMemoryCache(name="test"),
            )
            return await call(adapter)

    return asyncio.run(run())


class TestGeoapifyGeocoderAdapter:
    def test_geocode_reads_lon_lat_order(self, preferences, recorder):
        result = run_geocoder(
            preferences,
            recorder,
            lambda r: httpx.Response(200, json=RESULT),
            lambda adapter: adapter.geocode(" Pasadena, CA "),
        )

        assert result == Coordinate(34.1478, -118.1445)
        request = recorder.requests[0]
        assert request.url.path == "/v1/geocode/search"
        assert request.url.params["text"] == "Pasadena, CA"
        assert request.url.params["limit"] == "1"
        assert request.url.params["apiKey"] == "geoapify-key"

    def test_geocode_cached(self, preferences, recorder):
        cache = InMemoryCache(name="test")

        async def twice(adapter):
            await adapter.geocode("Pasadena, CA")
            return await adapter.geocode("pasadena, ca")

        result = run_geocoder(
            preferences, recorder, lambda r: httpx.Response(200, json=RESULT), twice, cache
        )

        assert result == Coordinate(34.1478, -118.1445)
        assert len(recorder.requests) == 1
        assert cache.get("geoapify:pasadena, ca") == result

    def test_no_features_is_none_and_not_cached(self, preferences, recorder):
        cache = InMemoryCache(name="test")
        result = run_geocoder(
            preferences,
            recorder,
            lambda r: httpx.Response(200, json={"features": []}),
            lambda adapter: adapter.geocode("Atlantis"),
            cache,
        )
        assert result is None
        assert cache.size() == 0

    def test_rejected_key_is_none(self, preferences, recorder, caplog):
        result = run_geocoder(
            preferences,
            recorder,
            lambda r: httpx.Response(401, json={"message": "Invalid apiKey"}),
            lambda adapter: adapter.geocode("Pasadena"),
        )
        assert result is None
        assert "Geocoder rejected API key" in caplog.text
        assert "geoapify-key" not in caplog.text

    def test_missing_key_skips_request(self, preferences, recorder):
        preferences.api_keys.clear()
        result = run_geocoder(
            preferences,
            recorder,
            lambda r: httpx.Response(200, json=RESULT),
            lambda adapter: adapter.geocode("Pasadena"),
        )
        assert result is None
        assert recorder.requests == []

    def test_reverse_geocode(self, preferences, recorder):
        label = run_geocoder(
            preferences,
            recorder,
            lambda r: httpx.Response(200, json=RESULT),
            lambda adapter: adapter.reverse_geocode(PASADENA),
        )

        assert label == "100 Colorado Blvd, Pasadena, CA 91101, United States"
        params = recorder.requests[0].url.params
        assert recorder.requests[0].url.path == "/v1/geocode/reverse"
        assert float(params["lat"]) == PASADENA.latitude
        assert float(params["lon"]) == PASADENA.longitude

    def test_reverse_geocode_sentinel_skips_request(self, preferences, recorder):
        label = run_geocoder(
            preferences,
            recorder,
            lambda r: httpx.Response(200, json=RESULT),
            lambda adapter: adapter.reverse_geocode(INVALID_COORDINATE),
        )
        assert label is None
        assert recorder.requests == []
