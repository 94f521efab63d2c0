"""Data directory, settings, timezone and path helpers for Lever."""

from __future__ import annotations

import logging
import os
import sys
from datetime import date, datetime, time, tzinfo
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from lever.fileio import read_yaml, write_yaml_atomic
from lever.models import Settings

logger = logging.getLogger(__name__)

APP_NAME = "Lever"
DATA_FILE = "lever-data.json"


def data_root() -> Path:
    """Directory holding lever-data.json, settings and logs.

    ``LEVER_HOME`` wins; otherwise the platform's per-user data directory.
    """
    override = os.environ.get("LEVER_HOME")
    if override:
        return Path(override).expanduser().resolve()
    home = Path.home()
    if sys.platform == "darwin":
        base = home / "Library" / "Application Support"
    elif sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(home / "AppData" / "Roaming")))
    else:
        base = Path(os.environ.get("XDG_DATA_HOME", str(home / ".local" / "share")))
    return base / APP_NAME


# ── Path helpers ──────────────────────────────────────────────

def data_path(root: Path | None = None) -> Path:
    if root is None:
        root = data_root()
    return root / DATA_FILE


def settings_path(root: Path | None = None) -> Path:
    if root is None:
        root = data_root()
    return root / "settings.yaml"


def hooks_config_path(root: Path | None = None) -> Path:
    if root is None:
        root = data_root()
    return root / "hooks.yaml"


def log_path(root: Path | None = None) -> Path:
    if root is None:
        root = data_root()
    return root / "lever.log"


def export_path(day: str, root: Path | None = None) -> Path:
    """Default Markdown export target for *day* (YYYY-MM-DD)."""
    if root is None:
        root = data_root()
    settings = load_settings(root)
    target = Path(settings.export_dir).expanduser() if settings.export_dir else root
    return target / f"lever-{day}.md"


# ── Settings ──────────────────────────────────────────────────

def load_settings(root: Path | None = None) -> Settings:
    """Load settings.yaml, falling back to defaults if missing or unreadable."""
    path = settings_path(root)
    try:
        return Settings.from_dict(read_yaml(path))
    except (OSError, ValueError, yaml.YAMLError):
        logger.warning("Could not read settings from %s; using defaults", path, exc_info=True)
        return Settings()


def save_settings(settings: Settings, root: Path | None = None) -> None:
    write_yaml_atomic(settings_path(root), settings.to_dict())


# ── Time ──────────────────────────────────────────────────────

def get_user_timezone(root: Path | None = None) -> tzinfo:
    """Configured timezone, or the system local zone when none is set."""
    name = load_settings(root).timezone
    if name:
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning("Unknown timezone %r in settings; using local time", name)
    return datetime.now().astimezone().tzinfo


def now_local(root: Path | None = None) -> datetime:
    """Get current datetime in user's timezone."""
    return datetime.now(get_user_timezone(root))


def to_local(value: datetime | date, tz: tzinfo | None = None) -> datetime:
    """Express *value* in the user's timezone.

    Plain dates become local midnight; naive datetimes are read as local.
    """
    if tz is None:
        tz = get_user_timezone()
    if not isinstance(value, datetime):
        return datetime.combine(value, time(), tzinfo=tz)
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


def start_of_day(value: datetime | date, tz: tzinfo | None = None) -> datetime:
    local = to_local(value, tz)
    return datetime.combine(local.date(), time(), tzinfo=local.tzinfo)


def date_key(value: datetime | date, tz: tzinfo | None = None) -> str:
    """Calendar day of *value* in local time, as YYYY-MM-DD."""
    return start_of_day(value, tz).date().isoformat()
