"""JSON persistence and Markdown export for the Lever state.

Saving and loading never raise: failures are logged and degrade to a
dropped write or a "no data" result, so the state can save after every
mutation without an error channel.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, tzinfo
from pathlib import Path
from typing import TYPE_CHECKING

from lever.fileio import read_json, write_json_atomic, write_text_atomic
from lever.models import JOURNEY_DAYS, StateSnapshot
from lever.workspace import data_path, to_local

if TYPE_CHECKING:
    from lever.state import AppState

logger = logging.getLogger(__name__)


def format_long_date(value: datetime | date, tz: tzinfo | None = None) -> str:
    """Render a date as e.g. 'October 19, 2026'."""
    if isinstance(value, datetime):
        value = to_local(value, tz).date()
    return f"{value:%B} {value.day}, {value.year}"


class StorageService:
    """Reads and writes ``lever-data.json`` under the data directory."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = root

    @property
    def path(self) -> Path:
        return data_path(self.root)

    def save(self, state: AppState) -> bool:
        """Write the full state atomically. Returns False if the write was dropped."""
        path = self.path
        try:
            write_json_atomic(path, state.to_snapshot().to_dict())
        except (OSError, TypeError, ValueError):
            logger.exception("Failed to save app state to %s", path)
            return False
        logger.debug("Saved app state to %s", path)
        return True

    def load(self) -> StateSnapshot | None:
        """Decoded snapshot, or None on first run or unreadable data."""
        path = self.path
        if not path.exists():
            logger.debug("No saved state at %s (first run)", path)
            return None
        try:
            return StateSnapshot.from_dict(read_json(path))
        except (OSError, TypeError, ValueError, RecursionError):
            logger.exception("Failed to load app state from %s", path)
            return None

    def export_to_markdown(self, state: AppState, exported_at: datetime | None = None) -> str:
        """Render the state as a Markdown document."""
        tz = state.tz
        if exported_at is None:
            exported_at = datetime.now(tz)

        lines = [
            "# Lever - Daily Focus",
            "",
            "## Vision",
            state.vision,
            "",
            "## Anti-Vision",
            state.anti_vision,
            "",
            "## Progress",
            f"- **Start Date:** {format_long_date(state.start_date, tz)}",
            f"- **Current Day:** Day {state.current_day} of {JOURNEY_DAYS}",
            f"- **Current Streak:** {state.current_streak} days",
            "",
            "## Today's Lever Tasks",
        ]
        for task in state.tasks:
            checkbox = "[x]" if task.is_completed else "[ ]"
            lines.append(f"- {checkbox} {task.title}")

        lines += ["", "---", f"*Exported from Lever on {format_long_date(exported_at, tz)}*"]
        return "\n".join(lines)

    def write_export(self, state: AppState, path: Path) -> bool:
        """Write the Markdown export to *path*. Returns False on failure."""
        try:
            write_text_atomic(path, self.export_to_markdown(state) + "\n")
        except OSError:
            logger.exception("Failed to write export to %s", path)
            return False
        logger.info("Exported Lever summary to %s", path)
        return True
