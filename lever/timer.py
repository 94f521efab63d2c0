"""Focus timer driver.

``TimerService`` advances ``AppState.timer_state`` by one second per tick
while it is running and pauses itself when the countdown completes. The tick
source is pluggable: any ``schedule(interval, callback)`` returning a handle
with ``stop()``. Textual's ``App.set_interval`` fits that shape; outside a UI,
``asyncio_scheduler`` ticks on the running asyncio loop. Ticks always run on
the owning event loop, never on a worker thread.
"""

from __future__ import annotations

import asyncio
import logging
import weakref
from typing import Any, Callable, Protocol

from lever.state import TIMER, AppState

logger = logging.getLogger(__name__)

TICK_INTERVAL = 1.0  # seconds


class TickHandle(Protocol):
    def stop(self) -> Any: ...


Scheduler = Callable[[float, Callable[[], None]], TickHandle]


class AsyncioTicker:
    """Repeating ``loop.call_later`` tick; stops on ``stop()``."""

    def __init__(self, loop: asyncio.AbstractEventLoop, interval: float, callback: Callable[[], None]) -> None:
        self._loop = loop
        self._interval = interval
        self._callback = callback
        self._stopped = False
        self._handle = loop.call_later(interval, self._fire)

    def _fire(self) -> None:
        if self._stopped:
            return
        self._handle = self._loop.call_later(self._interval, self._fire)
        self._callback()

    def stop(self) -> None:
        self._stopped = True
        self._handle.cancel()


def asyncio_scheduler(interval: float, callback: Callable[[], None]) -> AsyncioTicker:
    """Schedule *callback* every *interval* seconds on the running loop."""
    return AsyncioTicker(asyncio.get_running_loop(), interval, callback)


class TimerService:
    """Drives the focus countdown for one ``AppState``.

    The state is held by weak reference: once it is gone the service acts as
    stopped and every call is a no-op.
    """

    def __init__(
        self,
        state: AppState,
        schedule: Scheduler = asyncio_scheduler,
        on_complete: Callable[[AppState], None] | None = None,
    ) -> None:
        self._state_ref = weakref.ref(state)
        self._schedule = schedule
        self._on_complete = on_complete
        self._handle: TickHandle | None = None

    @property
    def state(self) -> AppState | None:
        return self._state_ref()

    @property
    def is_ticking(self) -> bool:
        return self._handle is not None

    def _cancel(self) -> None:
        if self._handle is not None:
            self._handle.stop()
            self._handle = None

    def start(self) -> None:
        state = self.state
        if state is None or state.timer_state.is_running:
            return
        state.timer_state.is_running = True
        self._cancel()
        self._handle = self._schedule(TICK_INTERVAL, self.tick)
        state.notify(TIMER)

    def pause(self) -> None:
        self._cancel()
        state = self.state
        if state is None:
            return
        state.timer_state.is_running = False
        state.save()
        state.notify(TIMER)

    def reset(self) -> None:
        self._cancel()
        state = self.state
        if state is None:
            return
        state.reset_timer()

    def toggle(self) -> None:
        state = self.state
        if state is None:
            return
        if state.timer_state.is_running:
            self.pause()
        else:
            self.start()

    def tick(self) -> None:
        """Advance one second; one tick counts as one second regardless of drift."""
        state = self.state
        if state is None:
            self._cancel()
            return
        timer = state.timer_state
        if not timer.is_running:
            # timer_state was replaced (reset or reload) under a live tick
            self._cancel()
            return

        timer.elapsed += 1

        if timer.is_complete:
            self.pause()
            logger.info("Focus timer finished after %d seconds", int(timer.elapsed))
            if self._on_complete is not None:
                try:
                    self._on_complete(state)
                except Exception:
                    logger.exception("Timer completion callback failed")
        else:
            state.notify(TIMER)

    def close(self) -> None:
        """Cancel any pending tick. Safe to call more than once."""
        self._cancel()

    def __enter__(self) -> TimerService:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
