"""Location resolver service - cached, single-flight "current location".

The resolved coordinate is the origin of every search. Resolving it can
mean a device fix or a remote geocoding call, so the result is cached
and concurrent callers share one resolution. Changing the
location-related preferences discards the cache and starts a fresh
resolution in the background.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Mapping, Optional, Set

from ..domain.errors import LocationPermissionError
from ..domain.models import INVALID_COORDINATE, Coordinate, LocationState, ProviderSelection
from ..ports.geocoding import GeocoderPort
from ..ports.location import DeviceLocationSourcePort
from ..ports.preferences import PreferencesPort

ADDRESS_NOT_FOUND = "Address not found"
LOCATION_NOT_AVAILABLE = "Location not available"
PERMISSION_NOT_GRANTED = "Location permission not granted"
NO_DEFAULT_LOCATION = "No default location set"


@dataclass
class LocationResolver:
    """Resolves and caches the search origin.

    States: EMPTY -> RESOLVING -> RESOLVED, and back to EMPTY on
    ``invalidate()``. At most one resolution runs at a time; callers that
    arrive while it runs await the same task.

    A resolution that finds nothing (no device fix, no default location,
    geocoding failed) completes with INVALID_COORDINATE and is cached
    like any other result until the next invalidation.

    Attributes:
        preferences: Source of use_device_location, default_location and provider
        device_source: Device position provider
        geocoders: Geocoder per backend, used for the default location
    """

    preferences: PreferencesPort
    device_source: DeviceLocationSourcePort
    geocoders: Mapping[ProviderSelection, GeocoderPort]

    _cached: Optional[Coordinate] = field(default=None, init=False, repr=False)
    _pending: Optional[asyncio.Task[Coordinate]] = field(default=None, init=False, repr=False)
    _generation: int = field(default=0, init=False, repr=False)
    _background: Set[asyncio.Task[None]] = field(default_factory=set, init=False, repr=False)
    _unsubscribers: List[Callable[[], None]] = field(default_factory=list, init=False, repr=False)
    _started: bool = field(default=False, init=False, repr=False)
    _closed: bool = field(default=False, init=False, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)
        self._follow_preferences()

    @property
    def state(self) -> LocationState:
        if self._cached is not None:
            return LocationState.RESOLVED
        if self._pending is not None:
            return LocationState.RESOLVING
        return LocationState.EMPTY

    @property
    def cached(self) -> Optional[Coordinate]:
        return self._cached

    async def start(self) -> None:
        """Start device updates and prefetch.

        Preference changes are followed from construction on; ``start``
        is only needed for device updates and the eager first fix.
        """
        if self._started:
            return
        self._started = True
        self._closed = False
        self._follow_preferences()
        if self.preferences.use_device_location.value:
            self.device_source.start_updates()
        self._logger.info(
            "Location resolver started",
            extra={"use_device_location": self.preferences.use_device_location.value},
        )
        self._prefetch()

    async def close(self) -> None:
        """Stop following preferences and cancel pending work."""
        self._closed = True
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        if self._started:
            self.device_source.stop_updates()
        self._started = False

        self._generation += 1
        pending = self._pending
        self._pending = None
        tasks = list(self._background)
        if pending is not None:
            tasks.append(pending)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._logger.debug("Location resolver closed")

    async def resolve(self) -> Coordinate:
        """Return the search origin, resolving it if needed.

        Raises:
            LocationPermissionError: Device location is enabled but access
                was denied. Nothing is cached; the next call retries.
        """
        while True:
            if self._cached is not None:
                return self._cached

            task = self._pending
            if task is None:
                task = self._start_resolution()

            try:
                return await asyncio.shield(task)
            except asyncio.CancelledError:
                current = asyncio.current_task()
                superseded = (
                    task.cancelled()
                    and task is not self._pending
                    and not self._closed
                    and (current is None or current.cancelling() == 0)
                )
                if not superseded:
                    raise
                # The shared resolution was invalidated; join the fresh one.
                self._logger.debug("Resolution superseded, re-joining")

    def invalidate(self) -> None:
        """Drop cached and in-flight state and prefetch a fresh location."""
        self._generation += 1
        self._cached = None
        pending = self._pending
        self._pending = None
        if pending is not None and not pending.done():
            pending.cancel()
        self._logger.info(
            "Location invalidated", extra={"generation": self._generation}
        )
        self._prefetch()

    async def describe_current_location(self) -> str:
        """Human-readable label of where searches are centred."""
        if self.preferences.use_device_location.value:
            try:
                coordinate = await self.device_source.get_current_location()
            except LocationPermissionError:
                return PERMISSION_NOT_GRANTED
            if coordinate is None or not coordinate.is_valid:
                return LOCATION_NOT_AVAILABLE
            geocoder = self.geocoders.get(self.preferences.provider.value)
            address = await geocoder.reverse_geocode(coordinate) if geocoder else None
            return address or ADDRESS_NOT_FOUND

        default_location = self.preferences.default_location.value
        if default_location and default_location.strip():
            return default_location.strip()
        return NO_DEFAULT_LOCATION

    def _follow_preferences(self) -> None:
        if self._unsubscribers:
            return
        self._unsubscribers = [
            self.preferences.use_device_location.subscribe(self._on_use_device_changed),
            self.preferences.default_location.subscribe(self._on_default_location_changed),
        ]

    def _start_resolution(self) -> asyncio.Task[Coordinate]:
        generation = self._generation
        task = asyncio.get_running_loop().create_task(
            self._run_resolution(generation), name=f"location-resolve-{generation}"
        )
        task.add_done_callback(_consume_result)
        self._pending = task
        return task

    async def _run_resolution(self, generation: int) -> Coordinate:
        coordinate: Optional[Coordinate] = None
        try:
            coordinate = await self._fetch_location()
            return coordinate
        finally:
            if generation == self._generation:
                self._pending = None
                if coordinate is not None:
                    self._cached = coordinate

    async def _fetch_location(self) -> Coordinate:
        if self.preferences.use_device_location.value:
            coordinate = await self.device_source.get_current_location()
            source = "device"
        else:
            coordinate = await self._geocode_default_location()
            source = "default_location"

        if coordinate is None or not coordinate.is_valid:
            self._logger.warning(
                "No valid device or default location available, using sentinel",
                extra={"source": source},
            )
            return INVALID_COORDINATE

        self._logger.info("Location resolved", extra={"source": source})
        return coordinate

    async def _geocode_default_location(self) -> Optional[Coordinate]:
        default_location = self.preferences.default_location.value
        if not default_location or not default_location.strip():
            return None
        provider = self.preferences.provider.value
        geocoder = self.geocoders.get(provider)
        if geocoder is None:
            self._logger.error(
                "No geocoder for provider", extra={"provider": provider.value}
            )
            return None
        return await geocoder.geocode(default_location)

    def _prefetch(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._logger.debug("No running event loop, prefetch deferred")
            return
        task = loop.create_task(self._prefetch_once(), name="location-prefetch")
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _prefetch_once(self) -> None:
        try:
            await self.resolve()
        except LocationPermissionError as e:
            self._logger.warning(
                "Location permission not granted during prefetch",
                extra={"error": str(e)},
            )

    def _on_use_device_changed(self, enabled: bool) -> None:
        if self._started:
            if enabled:
                self.device_source.start_updates()
            else:
                self.device_source.stop_updates()
        self.invalidate()

    def _on_default_location_changed(self, _location: Optional[str]) -> None:
        self.invalidate()


def _consume_result(task: asyncio.Task[Coordinate]) -> None:
    # Mark the outcome as retrieved; failures reach callers via resolve().
    if not task.cancelled():
        task.exception()
