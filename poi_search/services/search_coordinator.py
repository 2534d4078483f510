"""Search coordinator service - keystrokes in, place lists out.

Turns a stream of query edits into debounced, cancelable searches
against the active backend and publishes the outcome as observable
state. Only the most recent attempt is ever allowed to publish.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Mapping, Optional

from ..config import SearchConfig, get_config
from ..domain.errors import LocationPermissionError
from ..domain.models import PlaceRecord, ProviderSelection, SearchPhase, SearchRequest
from ..observable import ObservableValue
from ..ports.places import PlacesProviderPort
from ..ports.preferences import PreferencesPort
from .debounce import Debouncer
from .location_resolver import LocationResolver


@dataclass
class SearchCoordinator:
    """Debounced search orchestration over interchangeable backends.

    Flow per query edit:
    1. ``query`` is published immediately
    2. pending debounce timer and in-flight search are cancelled
    3. after the quiet period: resolve location, resolve category,
       call the backend that was active when the attempt started
    4. publish results if no newer edit arrived in the meantime

    Switching the provider preference re-routes the next search and
    autocomplete call; the current query is not re-run.

    Attributes:
        preferences: User preferences (provider selection)
        providers: Backend per provider selection
        location_resolver: Source of the search origin
        config: Search behaviour (debounce delay)

    Observable state:
        query, results, is_loading, phase, location_error, suggestions,
        category_scope
    """

    preferences: PreferencesPort
    providers: Mapping[ProviderSelection, PlacesProviderPort]
    location_resolver: LocationResolver
    config: SearchConfig = field(default_factory=lambda: get_config().search)

    query: ObservableValue[str] = field(init=False)
    results: ObservableValue[List[PlaceRecord]] = field(init=False)
    is_loading: ObservableValue[bool] = field(init=False)
    phase: ObservableValue[SearchPhase] = field(init=False)
    location_error: ObservableValue[Optional[str]] = field(init=False)
    suggestions: ObservableValue[List[str]] = field(init=False)
    category_scope: ObservableValue[Optional[str]] = field(init=False)

    _provider: PlacesProviderPort = field(init=False, repr=False)
    _search_debouncer: Debouncer = field(init=False, repr=False)
    _suggestion_debouncer: Debouncer = field(init=False, repr=False)
    _unsubscribe_provider: Optional[Callable[[], None]] = field(default=None, init=False, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)
        self.query = ObservableValue("", name="query")
        self.results = ObservableValue([], name="results")
        self.is_loading = ObservableValue(False, name="is_loading")
        self.phase = ObservableValue(SearchPhase.IDLE, name="phase")
        self.location_error = ObservableValue(None, name="location_error")
        self.suggestions = ObservableValue([], name="suggestions")
        self.category_scope = ObservableValue(None, name="category_scope")

        self._search_debouncer = Debouncer(self.config.debounce_seconds, name="search")
        self._suggestion_debouncer = Debouncer(
            self.config.debounce_seconds, name="suggestions"
        )
        self._provider = self.providers[self.preferences.provider.value]
        self._unsubscribe_provider = self.preferences.provider.subscribe(
            self._on_provider_changed
        )

    @property
    def active_provider(self) -> PlacesProviderPort:
        return self._provider

    async def start(self) -> None:
        await self.location_resolver.start()

    async def aclose(self) -> None:
        self._search_debouncer.cancel()
        self._suggestion_debouncer.cancel()
        if self._unsubscribe_provider is not None:
            self._unsubscribe_provider()
            self._unsubscribe_provider = None
        await self.location_resolver.close()

    async def __aenter__(self) -> SearchCoordinator:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def on_query_changed(self, text: str) -> None:
        """Handle an edit of the search box. Must run on the event loop."""
        self.query.set(text)
        self._search_debouncer.cancel()

        if not text.strip():
            self.results.set([])
            self.is_loading.set(False)
            self.phase.set(SearchPhase.IDLE)
            return

        self.is_loading.set(True)
        self.phase.set(SearchPhase.DEBOUNCING)
        self._search_debouncer.schedule(
            lambda generation: self._run_search(generation, text)
        )

    def on_category_selected(self, code: Optional[str]) -> None:
        """Scope free-text searches to a provider category, or clear it."""
        scope = code.strip() if code and code.strip() else None
        self.category_scope.set(scope)
        self._logger.debug("Category scope changed", extra={"category": scope})
        if self.query.value.strip():
            self.on_query_changed(self.query.value)

    def on_category_shortcut(self, label: str) -> None:
        """Start a fresh search for a landing-screen category label."""
        self.reset_search()
        self.on_query_changed(label)

    def reset_search(self) -> None:
        """Clear query and results and drop any pending search."""
        self._search_debouncer.cancel()
        self.query.set("")
        self.results.set([])
        self.is_loading.set(False)
        self.location_error.set(None)
        self.phase.set(SearchPhase.IDLE)

    def cancel_search(self) -> bool:
        """Stop pending work, keeping the current query and results.

        Returns:
            True if a search was pending.
        """
        if not self._search_debouncer.cancel():
            return False
        self.is_loading.set(False)
        self.phase.set(SearchPhase.CANCELLED)
        self._logger.debug("Search cancelled", extra={"query": self.query.value})
        return True

    def on_suggestion_query_changed(self, text: str) -> None:
        """Debounced autocomplete feeding ``suggestions``."""
        self._suggestion_debouncer.cancel()
        if not text.strip():
            self.suggestions.set([])
            return
        self._suggestion_debouncer.schedule(
            lambda generation: self._run_autocomplete(generation, text)
        )

    async def autocomplete(self, text: str) -> List[str]:
        """One-shot autocomplete through the active backend."""
        return await self._provider.autocomplete(text)

    async def place_details(self, place: PlaceRecord) -> PlaceRecord:
        """Enrich a record with phone and hours from its own backend.

        Returns the record unchanged when there is nothing to enrich.
        """
        if not place.provider_place_id:
            return place
        provider = self.providers.get(place.provider) if place.provider else None
        provider = provider or self._provider
        details = await provider.place_details(place.provider_place_id)
        if details is None:
            return place
        return place.with_details(phone=details.phone, hours=details.hours)

    async def wait_idle(self) -> None:
        """Wait until no search or autocomplete is pending."""
        await self._search_debouncer.wait_idle()
        await self._suggestion_debouncer.wait_idle()

    def _on_provider_changed(self, selection: ProviderSelection) -> None:
        provider = self.providers.get(selection)
        if provider is None:
            self._logger.error(
                "No backend registered for provider", extra={"provider": selection.value}
            )
            return
        self._provider = provider
        self._logger.info("Active provider switched", extra={"provider": selection.value})

    def _resolve_category(
        self, provider: PlacesProviderPort, text: str, scope: Optional[str]
    ) -> Optional[str]:
        mapped = provider.category_mapper.map(text)
        if mapped is not None:
            return mapped
        if scope and provider.category_mapper.is_known_code(scope):
            return scope
        return None

    async def _run_search(self, generation: int, text: str) -> None:
        provider = self._provider
        scope = self.category_scope.value
        debouncer = self._search_debouncer
        self.phase.set(SearchPhase.IN_FLIGHT)

        try:
            coordinate = await self.location_resolver.resolve()
        except LocationPermissionError as e:
            if not debouncer.is_current(generation):
                return
            self._logger.warning("Location permission not granted", extra={"error": str(e)})
            self.results.set([])
            self.location_error.set(e.message)
            self.is_loading.set(False)
            self.phase.set(SearchPhase.FAILED)
            return

        request = SearchRequest(
            query_text=text.strip(),
            coordinate=coordinate,
            category=self._resolve_category(provider, text, scope),
        )
        if not request.has_location:
            self._logger.warning("Searching without a valid location")

        self._logger.debug(
            "Dispatching search",
            extra={
                "query": request.query_text,
                "category": request.category,
                "provider": provider.selection.value,
                "generation": generation,
            },
        )
        try:
            results = await provider.search(
                request.query_text, request.coordinate, request.category
            )
        except Exception:
            self._logger.exception(
                "Search failed", extra={"provider": provider.selection.value}
            )
            if debouncer.is_current(generation):
                self.results.set([])
                self.is_loading.set(False)
                self.phase.set(SearchPhase.FAILED)
            return

        if not debouncer.is_current(generation):
            self._logger.debug("Discarding stale results", extra={"generation": generation})
            return

        self.location_error.set(None)
        self.results.set(results)
        self.is_loading.set(False)
        self.phase.set(SearchPhase.PUBLISHED)
        self._logger.info(
            "Search results published",
            extra={"results": len(results), "provider": provider.selection.value},
        )

    async def _run_autocomplete(self, generation: int, text: str) -> None:
        suggestions = await self._provider.autocomplete(text)
        if self._suggestion_debouncer.is_current(generation):
            self.suggestions.set(suggestions)
