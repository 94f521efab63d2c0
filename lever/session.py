"""Composition root: wires state, storage, timer driver and signals."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from lever.events import Signal
from lever.state import AppState
from lever.storage import StorageService
from lever.timer import Scheduler, TimerService, asyncio_scheduler

logger = logging.getLogger(__name__)


class Session:
    """Everything one running front-end needs, built in dependency order.

    ``add_new_task`` is the app-wide "add a lever task" intent: keyboard
    commands emit it and whichever task list is showing reacts to it.
    """

    def __init__(
        self,
        root: Path | None = None,
        schedule: Scheduler = asyncio_scheduler,
        on_timer_complete: Callable[[AppState], None] | None = None,
    ) -> None:
        self.storage = StorageService(root)
        self.state = AppState(self.storage)
        self.timer = TimerService(self.state, schedule=schedule, on_complete=on_timer_complete)
        self.add_new_task = Signal("add_new_task")

    def open(self) -> Session:
        """Hydrate from disk (if any) and apply the new-day reset."""
        snapshot = self.storage.load()
        if snapshot is not None:
            # Nothing is ticking yet, so a persisted running flag is stale.
            snapshot.timer_state.is_running = False
            self.state.load_from(snapshot)
            logger.info("Loaded state from %s", self.storage.path)
        if self.state.has_completed_onboarding:
            self.state.check_for_new_day()
        return self

    def close(self) -> None:
        self.timer.close()

    def __enter__(self) -> Session:
        return self.open()

    def __exit__(self, *exc_info: object) -> None:
        self.close()
