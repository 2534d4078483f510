"""Tests for the single-flight location resolver."""

import asyncio

import pytest

from conftest import PASADENA, SPRINGFIELD, FakeGeocoder, GatedLocationSource
from poi_search.adapters.location import StaticLocationSource
from poi_search.domain.errors import LocationPermissionError
from poi_search.domain.models import INVALID_COORDINATE, LocationState, ProviderSelection
from poi_search.services.location_resolver import (
    ADDRESS_NOT_FOUND,
    LOCATION_NOT_AVAILABLE,
    NO_DEFAULT_LOCATION,
    PERMISSION_NOT_GRANTED,
    LocationResolver,
)


def make_resolver(preferences, source=None, geocoders=None):
    return LocationResolver(
        preferences=preferences,
        device_source=source or StaticLocationSource(PASADENA),
        geocoders=geocoders or {selection: FakeGeocoder() for selection in ProviderSelection},
    )


class TestResolve:
    """Resolution, caching and single flight."""

    def test_device_location_resolved_and_cached(self, preferences):
        source = StaticLocationSource(PASADENA)
        resolver = make_resolver(preferences, source)

        async def run():
            first = await resolver.resolve()
            second = await resolver.resolve()
            return first, second

        assert asyncio.run(run()) == (PASADENA, PASADENA)
        assert source.lookups == 1
        assert resolver.state is LocationState.RESOLVED

    def test_concurrent_callers_share_one_resolution(self, preferences):
        async def run():
            source = GatedLocationSource(PASADENA)
            resolver = make_resolver(preferences, source)
            callers = [asyncio.create_task(resolver.resolve()) for _ in range(5)]
            await asyncio.sleep(0.01)
            assert resolver.state is LocationState.RESOLVING
            source.gate.set()
            results = await asyncio.gather(*callers)
            return results, source.lookups

        results, lookups = asyncio.run(run())
        assert results == [PASADENA] * 5
        assert lookups == 1

    def test_default_location_geocoded_with_active_provider(self, preferences):
        preferences.use_device_location.set(False)
        preferences.default_location.set("Springfield, IL")
        preferences.provider.set(ProviderSelection.HERE)
        here = FakeGeocoder({"Springfield, IL": SPRINGFIELD})
        geoapify = FakeGeocoder({"Springfield, IL": PASADENA})
        resolver = make_resolver(
            preferences,
            geocoders={
                ProviderSelection.HERE: here,
                ProviderSelection.GEOAPIFY: geoapify,
                ProviderSelection.GOOGLE_PLACES: FakeGeocoder(),
            },
        )

        assert asyncio.run(resolver.resolve()) == SPRINGFIELD
        assert here.geocode_calls == ["Springfield, IL"]
        assert geoapify.geocode_calls == []

    def test_nothing_available_resolves_to_sentinel(self, preferences, caplog):
        preferences.use_device_location.set(False)
        resolver = make_resolver(preferences)

        assert asyncio.run(resolver.resolve()) == INVALID_COORDINATE
        assert resolver.state is LocationState.RESOLVED
        assert "using sentinel" in caplog.text

    def test_device_without_fix_resolves_to_sentinel(self, preferences):
        resolver = make_resolver(preferences, StaticLocationSource(None))
        assert asyncio.run(resolver.resolve()) == INVALID_COORDINATE

    def test_permission_error_propagates_and_is_not_cached(self, preferences):
        source = StaticLocationSource(PASADENA, permission_granted=False)
        resolver = make_resolver(preferences, source)

        with pytest.raises(LocationPermissionError):
            asyncio.run(resolver.resolve())
        assert resolver.state is LocationState.EMPTY

        source.permission_granted = True
        assert asyncio.run(resolver.resolve()) == PASADENA
        assert source.lookups == 2

    def test_caller_cancellation_does_not_cancel_shared_resolution(self, preferences):
        async def run():
            source = GatedLocationSource(PASADENA)
            resolver = make_resolver(preferences, source)
            impatient = asyncio.create_task(resolver.resolve())
            patient = asyncio.create_task(resolver.resolve())
            await asyncio.sleep(0.01)
            impatient.cancel()
            await asyncio.sleep(0.01)
            source.gate.set()
            with pytest.raises(asyncio.CancelledError):
                await impatient
            return await patient, source.lookups

        assert asyncio.run(run()) == (PASADENA, 1)


class TestInvalidation:
    """Preference changes discard the cache."""

    def test_invalidate_discards_cache_and_prefetches(self, preferences):
        async def run():
            source = StaticLocationSource(PASADENA)
            resolver = make_resolver(preferences, source)
            await resolver.resolve()
            source.move_to(SPRINGFIELD)
            resolver.invalidate()
            assert resolver.state is not LocationState.RESOLVED
            await asyncio.sleep(0.01)
            return resolver.cached, source.lookups

        cached, lookups = asyncio.run(run())
        assert cached == SPRINGFIELD
        assert lookups == 2

    def test_waiters_rejoin_fresh_resolution_after_invalidate(self, preferences):
        async def run():
            source = GatedLocationSource(PASADENA)
            resolver = make_resolver(preferences, source)
            waiter = asyncio.create_task(resolver.resolve())
            await asyncio.sleep(0.01)
            source.move_to(SPRINGFIELD)
            resolver.invalidate()
            await asyncio.sleep(0.01)
            source.gate.set()
            return await waiter

        assert asyncio.run(run()) == SPRINGFIELD

    def test_each_preference_change_triggers_exactly_one_resolution(self, preferences):
        preferences.use_device_location.set(False)
        preferences.default_location.set("Pasadena, CA")
        geocoder = FakeGeocoder({"Pasadena, CA": PASADENA, "Springfield, IL": SPRINGFIELD})
        resolver = make_resolver(
            preferences, geocoders={selection: geocoder for selection in ProviderSelection}
        )

        async def run():
            await resolver.start()
            await asyncio.sleep(0.01)
            assert resolver.cached == PASADENA

            await preferences.save_default_location("Springfield, IL")
            await asyncio.sleep(0.01)
            coordinate = await resolver.resolve()
            await resolver.close()
            return coordinate

        assert asyncio.run(run()) == SPRINGFIELD
        assert geocoder.geocode_calls == ["Pasadena, CA", "Springfield, IL"]

    def test_preference_change_followed_without_start(self, preferences):
        preferences.use_device_location.set(False)
        preferences.default_location.set("Pasadena, CA")
        geocoder = FakeGeocoder({"Pasadena, CA": PASADENA, "Springfield, IL": SPRINGFIELD})
        resolver = make_resolver(
            preferences, geocoders={selection: geocoder for selection in ProviderSelection}
        )

        async def run():
            first = await resolver.resolve()
            await preferences.save_default_location("Springfield, IL")
            return first, await resolver.resolve()

        assert asyncio.run(run()) == (PASADENA, SPRINGFIELD)
        assert geocoder.geocode_calls == ["Pasadena, CA", "Springfield, IL"]
        assert preferences.default_location.subscriber_count == 1

    def test_toggling_device_location_switches_updates(self, preferences):
        source = StaticLocationSource(PASADENA)
        resolver = make_resolver(preferences, source)

        async def run():
            await resolver.start()
            assert source.updates_active
            await preferences.save_use_device_location(False)
            assert not source.updates_active
            await preferences.save_use_device_location(True)
            assert source.updates_active
            await resolver.close()

        asyncio.run(run())
        assert not source.updates_active
        assert preferences.use_device_location.subscriber_count == 0

    def test_prefetch_logs_permission_error(self, preferences, caplog):
        source = StaticLocationSource(PASADENA, permission_granted=False)
        resolver = make_resolver(preferences, source)

        async def run():
            await resolver.start()
            await asyncio.sleep(0.01)
            await resolver.close()

        asyncio.run(run())
        assert "Location permission not granted during prefetch" in caplog.text
        assert resolver.state is LocationState.EMPTY

    def test_close_cancels_pending_resolution(self, preferences):
        async def run():
            source = GatedLocationSource(PASADENA)
            resolver = make_resolver(preferences, source)
            waiter = asyncio.create_task(resolver.resolve())
            await asyncio.sleep(0.01)
            await resolver.close()
            with pytest.raises(asyncio.CancelledError):
                await waiter

        asyncio.run(run())


class TestDescribeCurrentLocation:
    def test_device_address(self, preferences):
        geocoder = FakeGeocoder()
        geocoder.addresses[PASADENA] = "100 Colorado Blvd, Pasadena"
        resolver = make_resolver(
            preferences, geocoders={selection: geocoder for selection in ProviderSelection}
        )
        assert asyncio.run(resolver.describe_current_location()) == "100 Colorado Blvd, Pasadena"

    def test_device_address_not_found(self, preferences):
        resolver = make_resolver(preferences)
        assert asyncio.run(resolver.describe_current_location()) == ADDRESS_NOT_FOUND

    def test_device_without_fix(self, preferences):
        resolver = make_resolver(preferences, StaticLocationSource(None))
        assert asyncio.run(resolver.describe_current_location()) == LOCATION_NOT_AVAILABLE

    def test_device_permission_denied(self, preferences):
        resolver = make_resolver(
            preferences, StaticLocationSource(PASADENA, permission_granted=False)
        )
        assert asyncio.run(resolver.describe_current_location()) == PERMISSION_NOT_GRANTED

    def test_default_location_label(self, preferences):
        preferences.use_device_location.set(False)
        preferences.default_location.set("Pasadena, CA")
        resolver = make_resolver(preferences)
        assert asyncio.run(resolver.describe_current_location()) == "Pasadena, CA"

    def test_no_default_location(self, preferences):
        preferences.use_device_location.set(False)
        resolver = make_resolver(preferences)
        assert asyncio.run(resolver.describe_current_location()) == NO_DEFAULT_LOCATION
