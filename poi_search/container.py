"""Service registry wiring ports to adapters.

Keys are usually port Protocols or concrete classes; string and tuple
keys name collections ("providers") and per-backend instances
(``("geocoder", selection)``). Factories run lazily on first resolve.
The registry itself is lock-protected; the async objects it builds
belong to the event loop that first uses them.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

import httpx

from .config import AppConfig, get_config
from .domain.models import ProviderSelection

Factory = Callable[[], Any]


@dataclass
class Container:
    """Lazy factory registry with optional singletons.

    Usage:
        container = Container.create_default()
        coordinator = container.resolve(SearchCoordinator)

        # swap one binding, e.g. a fixed search origin
        container.register(DeviceLocationSourcePort, lambda: StaticLocationSource(coord))

    Attributes:
        config: Configuration the default bindings are built from
    """

    config: AppConfig = field(default_factory=get_config)

    _factories: Dict[Any, Factory] = field(default_factory=dict, repr=False)
    _instances: Dict[Any, Any] = field(default_factory=dict, repr=False)
    _shared: set[Any] = field(default_factory=set, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def register(self, key: Any, factory: Factory, singleton: bool = True) -> None:
        """Bind ``key`` to ``factory``, replacing any earlier binding.

        An instance already built for ``key`` is dropped, so the next
        resolve uses the new factory.
        """
        with self._lock:
            self._factories[key] = factory
            self._instances.pop(key, None)
            if singleton:
                self._shared.add(key)
            else:
                self._shared.discard(key)

    def resolve(self, key: Any) -> Any:
        """Build or return the instance bound to ``key``.

        Raises:
            KeyError: Nothing is bound to ``key``.
        """
        with self._lock:
            try:
                factory = self._factories[key]
            except KeyError:
                raise KeyError(f"Nothing registered for {key!r}") from None
            if key not in self._shared:
                return factory()
            if key not in self._instances:
                self._instances[key] = factory()
            return self._instances[key]

    def is_registered(self, key: Any) -> bool:
        return key in self._factories

    def clear_singletons(self) -> None:
        """Forget built instances; bindings stay."""
        with self._lock:
            self._instances.clear()

    def clear_all(self) -> None:
        with self._lock:
            self._factories.clear()
            self._instances.clear()
            self._shared.clear()

    async def aclose(self) -> None:
        """Close the shared HTTP client if one was created."""
        with self._lock:
            client = self._instances.pop(httpx.AsyncClient, None)
        if client is not None:
            await client.aclose()

    @classmethod
    def create_default(cls, config: Optional[AppConfig] = None) -> Container:
        """Production bindings.

        Keys registered:
        - PreferencesPort, CachePort, httpx.AsyncClient, DeviceLocationSourcePort
        - each places adapter class and each ``("geocoder", selection)``
        - "providers" and "geocoders": mappings keyed by ProviderSelection
        - LocationResolver, SearchCoordinator
        """
        from .adapters.cache import InMemoryCache
        from .adapters.geocoding import GeoapifyGeocoderAdapter, GeopyGeocoderAdapter
        from .adapters.location import StaticLocationSource
        from .adapters.places import (
            GeoapifyPlacesAdapter,
            GooglePlacesAdapter,
            HerePlacesAdapter,
            build_http_client,
        )
        from .adapters.preferences import InMemoryPreferencesStore
        from .ports.cache import CachePort
        from .ports.location import DeviceLocationSourcePort
        from .ports.preferences import PreferencesPort
        from .services import LocationResolver, SearchCoordinator

        config = config or get_config()
        container = cls(config=config)

        container.register(
            PreferencesPort, lambda: InMemoryPreferencesStore.from_config(config)
        )

        # Geocoding cache (shared across geocoders, keys carry the provider)
        container.register(
            CachePort,
            lambda: InMemoryCache(
                name="geocode",
                default_ttl_seconds=config.geocoding.cache_ttl_seconds,
                max_size=config.geocoding.cache_max_size,
            ),
        )

        container.register(httpx.AsyncClient, lambda: build_http_client(config.http))

        # No platform location service; searches without one use the
        # default location.
        container.register(DeviceLocationSourcePort, lambda: StaticLocationSource())

        adapter_types = {
            ProviderSelection.GOOGLE_PLACES: GooglePlacesAdapter,
            ProviderSelection.GEOAPIFY: GeoapifyPlacesAdapter,
            ProviderSelection.HERE: HerePlacesAdapter,
        }
        for adapter_type in adapter_types.values():
            container.register(
                adapter_type,
                lambda adapter_type=adapter_type: adapter_type(
                    preferences=container.resolve(PreferencesPort),
                    client=container.resolve(httpx.AsyncClient),
                    config=config.providers,
                ),
            )
        container.register(
            "providers",
            lambda: {
                selection: container.resolve(adapter_type)
                for selection, adapter_type in adapter_types.items()
            },
        )

        for selection in (ProviderSelection.GOOGLE_PLACES, ProviderSelection.HERE):
            container.register(
                ("geocoder", selection),
                lambda selection=selection: GeopyGeocoderAdapter(
                    selection=selection,
                    preferences=container.resolve(PreferencesPort),
                    config=config.geocoding,
                    cache=container.resolve(CachePort),
                ),
            )
        container.register(
            ("geocoder", ProviderSelection.GEOAPIFY),
            lambda: GeoapifyGeocoderAdapter(
                preferences=container.resolve(PreferencesPort),
                client=container.resolve(httpx.AsyncClient),
                config=config.geocoding,
                cache=container.resolve(CachePort),
            ),
        )
        container.register(
            "geocoders",
            lambda: {
                selection: container.resolve(("geocoder", selection))
                for selection in ProviderSelection
            },
        )

        container.register(
            LocationResolver,
            lambda: LocationResolver(
                preferences=container.resolve(PreferencesPort),
                device_source=container.resolve(DeviceLocationSourcePort),
                geocoders=container.resolve("geocoders"),
            ),
        )
        container.register(
            SearchCoordinator,
            lambda: SearchCoordinator(
                preferences=container.resolve(PreferencesPort),
                providers=container.resolve("providers"),
                location_resolver=container.resolve(LocationResolver),
                config=config.search,
            ),
        )

        return container


_default: Optional[Container] = None
_default_lock = threading.Lock()


def get_container() -> Container:
    """Process-wide container, built from ``get_config()`` on first use."""
    global _default
    with _default_lock:
        if _default is None:
            _default = Container.create_default()
        return _default


def reset_container() -> None:
    """Drop the process-wide container (tests)."""
    global _default
    with _default_lock:
        if _default is not None:
            _default.clear_all()
        _default = None
