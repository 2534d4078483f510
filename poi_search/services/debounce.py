"""Cancelable debounce timer with a generation counter.

Each ``schedule()`` discards the previous timer and in-flight work and
hands the new work a generation number. Work that finishes after being
superseded can check ``is_current(generation)`` before touching shared
state.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

Work = Callable[[int], Awaitable[None]]

_logger = logging.getLogger(__name__)


class Debouncer:
    """Runs at most one piece of work per quiet period.

    Example:
        debouncer = Debouncer(0.3, name="search")
        debouncer.schedule(lambda generation: run_search(generation, "pizza"))
        debouncer.schedule(lambda generation: run_search(generation, "pizza hut"))
        # only the second search ever starts
    """

    def __init__(self, delay_seconds: float, *, name: str = "debounce") -> None:
        self.delay_seconds = delay_seconds
        self._name = name
        self._generation = 0
        self._timer: Optional[asyncio.TimerHandle] = None
        self._task: Optional[asyncio.Task[None]] = None
        self._idle = asyncio.Event()
        self._idle.set()

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def pending(self) -> bool:
        """True while a timer is armed or work is running."""
        return self._timer is not None or self._task is not None

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    def schedule(self, work: Work) -> int:
        """Arm the timer for ``work``, superseding anything pending.

        Must be called from the event loop thread.

        Returns:
            The generation assigned to ``work``.
        """
        self.cancel()
        loop = asyncio.get_running_loop()
        generation = self._generation
        self._idle.clear()
        self._timer = loop.call_later(self.delay_seconds, self._fire, generation, work)
        return generation

    def cancel(self) -> bool:
        """Disarm the timer and cancel running work.

        Returns:
            True if anything was pending.
        """
        had_pending = self.pending
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._task is not None:
            self._task.cancel()
            self._task = None
        self._idle.set()
        return had_pending

    async def wait_idle(self) -> None:
        """Wait until no timer is armed and no work is running."""
        await self._idle.wait()

    def _fire(self, generation: int, work: Work) -> None:
        self._timer = None
        if generation != self._generation:
            return
        task = asyncio.get_running_loop().create_task(
            work(generation), name=f"{self._name}-{generation}"
        )
        self._task = task
        task.add_done_callback(self._on_done)

    def _on_done(self, task: asyncio.Task[None]) -> None:
        if task is self._task:
            self._task = None
            if self._timer is None:
                self._idle.set()
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            _logger.error(
                "Debounced work failed",
                exc_info=error,
                extra={"debouncer": self._name},
            )
