"""Typed dataclasses for the Lever data model.

All models use from_dict/to_dict for JSON/YAML serialization.
camelCase in JSON is mapped to snake_case in Python.
Unknown keys are ignored; missing keys use defaults. Present keys of the
wrong type (null included) raise ValueError.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


MAX_TASKS = 3
JOURNEY_DAYS = 365
DEFAULT_TIMER_DURATION = 60 * 60  # seconds


# ── Datetime helpers ──────────────────────────────────────────


def parse_datetime(value: Any) -> datetime | None:
    """Parse an ISO-8601 date-time; naive values are taken as UTC."""
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str) and value.strip():
        s = value.strip()
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        dt = datetime.fromisoformat(s)
    else:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _typed(d: dict[str, Any], key: str, kind: type | tuple[type, ...], default: Any) -> Any:
    """Value of *key* if it is a *kind*; a missing key gives *default*.

    Anything else (null included) raises ValueError. bool is never accepted
    as a number.
    """
    if key not in d:
        return default
    value = d[key]
    if not isinstance(value, kind) or (isinstance(value, bool) and kind is not bool):
        raise ValueError(f"{key!r} has the wrong type: {value!r}")
    return value


def format_datetime(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.astimezone()
    return dt.isoformat()


# ── Settings ──────────────────────────────────────────────────


@dataclass
class Settings:
    timezone: str | None = None  # IANA name; None means system local time
    log_level: str = "INFO"
    export_dir: str | None = None

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Settings:
        if not d or not isinstance(d, dict):
            return cls()
        tz = d.get("timezone")
        export_dir = d.get("export_dir")
        return cls(
            timezone=str(tz) if tz else None,
            log_level=str(d.get("log_level", "INFO")).upper(),
            export_dir=str(export_dir) if export_dir else None,
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"log_level": self.log_level}
        if self.timezone:
            d["timezone"] = self.timezone
        if self.export_dir:
            d["export_dir"] = self.export_dir
        return d


# ── Tasks ─────────────────────────────────────────────────────


@dataclass
class LeverTask:
    """One of the (at most three) daily priority items."""

    title: str = ""
    is_completed: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> LeverTask:
        if not isinstance(d, dict):
            raise ValueError("task must be an object")
        created = parse_datetime(_typed(d, "createdAt", str, None))
        return cls(
            id=_typed(d, "id", str, "") or str(uuid.uuid4()),
            title=_typed(d, "title", str, ""),
            is_completed=_typed(d, "isCompleted", bool, False),
            created_at=created or datetime.now(timezone.utc),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "isCompleted": self.is_completed,
            "createdAt": format_datetime(self.created_at),
        }


# ── Timer ─────────────────────────────────────────────────────


@dataclass
class TimerState:
    """Focus countdown; all values in seconds."""

    duration: float = DEFAULT_TIMER_DURATION
    elapsed: float = 0
    is_running: bool = False

    @property
    def remaining(self) -> float:
        return max(0, self.duration - self.elapsed)

    @property
    def progress(self) -> float:
        if self.duration <= 0:
            return 0.0
        return min(1.0, max(0.0, self.elapsed / self.duration))

    @property
    def is_complete(self) -> bool:
        return self.elapsed >= self.duration

    @property
    def formatted_remaining(self) -> str:
        """Remaining time as MM:SS (minutes are not wrapped at 60)."""
        total = int(self.remaining)
        return f"{total // 60:02d}:{total % 60:02d}"

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> TimerState:
        if not isinstance(d, dict):
            raise ValueError("timerState must be an object")
        return cls(
            duration=float(_typed(d, "duration", (int, float), DEFAULT_TIMER_DURATION)),
            elapsed=max(0.0, float(_typed(d, "elapsed", (int, float), 0))),
            is_running=_typed(d, "isRunning", bool, False),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "duration": self.duration,
            "elapsed": self.elapsed,
            "isRunning": self.is_running,
        }


# ── Persisted snapshot ────────────────────────────────────────


@dataclass
class StateSnapshot:
    """Decoded form of lever-data.json."""

    vision: str = ""
    anti_vision: str = ""
    start_date: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    completed_days: set[str] = field(default_factory=set)
    tasks: list[LeverTask] = field(default_factory=list)
    timer_state: TimerState = field(default_factory=TimerState)
    has_completed_onboarding: bool = False

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> StateSnapshot:
        """Decode a persisted document. Raises ValueError on malformed input."""
        if not isinstance(d, dict):
            raise ValueError("state document must be an object")
        start = parse_datetime(_typed(d, "startDate", str, None))
        completed = set()
        for day in _typed(d, "completedDays", list, []):
            if not isinstance(day, str):
                raise ValueError(f"completedDays entry is not a string: {day!r}")
            # validates YYYY-MM-DD; raises ValueError otherwise
            completed.add(datetime.strptime(day, "%Y-%m-%d").date().isoformat())
        return cls(
            vision=_typed(d, "vision", str, ""),
            anti_vision=_typed(d, "antiVision", str, ""),
            start_date=start or datetime.now(timezone.utc),
            completed_days=completed,
            tasks=[LeverTask.from_dict(t) for t in _typed(d, "tasks", list, [])][:MAX_TASKS],
            timer_state=TimerState.from_dict(_typed(d, "timerState", dict, {})),
            has_completed_onboarding=_typed(d, "hasCompletedOnboarding", bool, False),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "vision": self.vision,
            "antiVision": self.anti_vision,
            "startDate": format_datetime(self.start_date),
            "completedDays": sorted(self.completed_days),
            "tasks": [t.to_dict() for t in self.tasks],
            "timerState": self.timer_state.to_dict(),
            "hasCompletedOnboarding": self.has_completed_onboarding,
        }
