"""The Lever application state: vision, journey progress, daily levers, timer.

``AppState`` is the single mutable aggregate the front-end renders from.
Every mutating method saves through the attached ``StorageService`` and then
notifies subscribers with the name of the change. Guard violations (empty
title, full task list, unknown task id) are silent no-ops; nothing here
raises to the caller.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, timedelta, tzinfo
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Union

from lever.models import MAX_TASKS, LeverTask, StateSnapshot, TimerState
from lever.workspace import date_key, get_user_timezone, to_local

if TYPE_CHECKING:
    from lever.storage import StorageService

logger = logging.getLogger(__name__)

Observer = Callable[["AppState", str], None]
TaskRef = Union[LeverTask, str]

# Change names passed to observers
VISION = "vision"
ANTI_VISION = "anti_vision"
DAY_COMPLETED = "day_completed"
TASKS = "tasks"
TIMER = "timer"
ONBOARDING = "onboarding"
LOADED = "loaded"


class AppState:
    def __init__(self, storage: StorageService | None = None) -> None:
        self._storage = storage
        self._root: Path | None = storage.root if storage is not None else None
        self._tz: tzinfo = get_user_timezone(self._root)
        self._observers: list[Observer] = []

        self.vision: str = ""
        self.anti_vision: str = ""
        self.start_date: datetime = datetime.now(self.tz)
        self.completed_days: set[str] = set()
        self.tasks: list[LeverTask] = []
        self.timer_state: TimerState = TimerState()
        self.has_completed_onboarding: bool = False

    # ── Observers ─────────────────────────────────────────────

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Call *observer(state, change)* after every mutation.

        Returns a callable that unsubscribes it.
        """
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def notify(self, change: str) -> None:
        for observer in list(self._observers):
            try:
                observer(self, change)
            except Exception:
                logger.exception("State observer failed on %r", change)

    def save(self) -> None:
        if self._storage is not None:
            self._storage.save(self)

    def _commit(self, change: str) -> None:
        self.save()
        self.notify(change)

    # ── Dates ─────────────────────────────────────────────────

    @property
    def tz(self) -> tzinfo:
        """User timezone, read from settings.yaml once at construction."""
        return self._tz

    def now(self) -> datetime:
        return datetime.now(self.tz)

    def date_key(self, value: datetime | date) -> str:
        """YYYY-MM-DD of the local calendar day containing *value*."""
        if not isinstance(value, datetime):
            return value.isoformat()
        return date_key(value, self.tz)

    def is_day_completed(self, value: datetime | date) -> bool:
        return self.date_key(value) in self.completed_days

    # ── Derived ───────────────────────────────────────────────

    @property
    def current_day(self) -> int:
        """1-indexed day of the journey; day 1 is the start date itself."""
        tz = self.tz
        today = datetime.now(tz).date()
        start = to_local(self.start_date, tz).date()
        return (today - start).days + 1

    @property
    def current_streak(self) -> int:
        """Consecutive completed days ending today, or yesterday if today is open."""
        streak = 0
        check = self.now().date()

        if self.is_day_completed(check):
            streak = 1
        check -= timedelta(days=1)

        while self.is_day_completed(check):
            streak += 1
            check -= timedelta(days=1)

        return streak

    @property
    def today_key(self) -> str:
        return self.now().date().isoformat()

    @property
    def is_today_completed(self) -> bool:
        return self.today_key in self.completed_days

    @property
    def all_tasks_completed(self) -> bool:
        return bool(self.tasks) and all(t.is_completed for t in self.tasks)

    @property
    def can_add_task(self) -> bool:
        return len(self.tasks) < MAX_TASKS

    # ── Mutations ─────────────────────────────────────────────

    def mark_today_complete(self) -> None:
        self.completed_days.add(self.today_key)
        logger.info("Day %d marked complete (streak %d)", self.current_day, self.current_streak)
        self._commit(DAY_COMPLETED)

    def add_task(self, title: str) -> None:
        """Append a lever task. No-op on an empty title or a full list.

        Callers trim surrounding whitespace first.
        """
        if not title or len(self.tasks) >= MAX_TASKS:
            return
        self.tasks.append(LeverTask(title=title, created_at=self.now()))
        self._commit(TASKS)

    def _index_of(self, task: TaskRef) -> int | None:
        task_id = task.id if isinstance(task, LeverTask) else task
        for i, t in enumerate(self.tasks):
            if t.id == task_id:
                return i
        return None

    def toggle_task(self, task: TaskRef) -> None:
        """Flip completion of the task with the same id (task or id string)."""
        index = self._index_of(task)
        if index is None:
            return
        self.tasks[index].is_completed = not self.tasks[index].is_completed
        self._commit(TASKS)

    def delete_task(self, task: TaskRef) -> None:
        index = self._index_of(task)
        if index is None:
            return
        del self.tasks[index]
        self._commit(TASKS)

    def reset_tasks_for_new_day(self) -> None:
        for task in self.tasks:
            task.is_completed = False
        self._commit(TASKS)

    def check_for_new_day(self) -> bool:
        """Reset completion flags if the first task was created before today.

        The calendar day is inferred from the first task's ``created_at``, so
        an empty task list never triggers a reset. Returns True on reset.
        """
        if not self.tasks:
            return False
        if self.date_key(self.tasks[0].created_at) == self.today_key:
            return False
        logger.info("New day detected; resetting %d lever task(s)", len(self.tasks))
        self.reset_tasks_for_new_day()
        return True

    def update_vision(self, text: str) -> None:
        self.vision = text
        self._commit(VISION)

    def update_anti_vision(self, text: str) -> None:
        self.anti_vision = text
        self._commit(ANTI_VISION)

    def complete_onboarding(self, vision: str, anti_vision: str, start_date: datetime | date) -> None:
        # Repeat calls are allowed and simply overwrite the three fields.
        self.vision = vision
        self.anti_vision = anti_vision
        self.start_date = to_local(start_date, self.tz)
        self.has_completed_onboarding = True
        logger.info("Onboarding completed; journey starts %s", self.date_key(self.start_date))
        self._commit(ONBOARDING)

    def reset_timer(self) -> None:
        self.timer_state = TimerState()
        self._commit(TIMER)

    # ── Snapshots ─────────────────────────────────────────────

    def to_snapshot(self) -> StateSnapshot:
        return StateSnapshot(
            vision=self.vision,
            anti_vision=self.anti_vision,
            start_date=self.start_date,
            completed_days=set(self.completed_days),
            tasks=[replace(t) for t in self.tasks],
            timer_state=replace(self.timer_state),
            has_completed_onboarding=self.has_completed_onboarding,
        )

    def load_from(self, snapshot: StateSnapshot) -> None:
        """Replace every persisted field with *snapshot*'s values (no save)."""
        self.vision = snapshot.vision
        self.anti_vision = snapshot.anti_vision
        self.start_date = snapshot.start_date
        self.completed_days = set(snapshot.completed_days)
        self.tasks = [replace(t) for t in snapshot.tasks]
        self.timer_state = replace(snapshot.timer_state)
        self.has_completed_onboarding = snapshot.has_completed_onboarding
        self.notify(LOADED)

    def __repr__(self) -> str:
        return (
            f"AppState(day={self.current_day}, streak={self.current_streak}, "
            f"tasks={len(self.tasks)}, onboarded={self.has_completed_onboarding})"
        )
