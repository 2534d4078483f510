"""Observable single values.

Used both for user preferences (provider, location settings, radius)
and for the state a SearchCoordinator publishes (query, results,
loading flag). Listeners run synchronously on the thread that calls
``set()``, which for this package is always the event loop thread.
"""

from __future__ import annotations

import logging
from typing import Callable, Generic, List, TypeVar

T = TypeVar("T")

Listener = Callable[[T], None]

_logger = logging.getLogger(__name__)


class ObservableValue(Generic[T]):
    """Holds one value and notifies subscribers when it changes.

    Setting a value equal to the current one is a no-op, so listeners
    only ever see real changes.

    Example:
        radius = ObservableValue(10, name="search_radius_miles")
        unsubscribe = radius.subscribe(lambda miles: print(miles))
        radius.set(5)      # prints 5
        unsubscribe()
    """

    def __init__(self, initial: T, *, name: str = "value") -> None:
        self._value = initial
        self._name = name
        self._listeners: List[Listener[T]] = []

    def __repr__(self) -> str:
        return f"ObservableValue({self._name}={self._value!r})"

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> bool:
        """Replace the value.

        Returns:
            True if the value changed and listeners were notified.
        """
        if value == self._value:
            return False
        self._value = value
        for listener in list(self._listeners):
            try:
                listener(value)
            except Exception:
                _logger.exception(
                    "Observable listener failed", extra={"observable": self._name}
                )
        return True

    def subscribe(
        self, listener: Listener[T], *, emit_current: bool = False
    ) -> Callable[[], None]:
        """Register a listener.

        Args:
            listener: Called with each new value.
            emit_current: Also call the listener right away with the
                current value.

        Returns:
            A callable that removes the listener.
        """
        self._listeners.append(listener)
        if emit_current:
            listener(self._value)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._listeners)
