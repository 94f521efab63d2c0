"""Lever core library — state, persistence and focus timer.

Public API re-exports for convenient imports:
    from lever import Session, AppState, StorageService, TimerService, ...
"""

__version__ = "0.1.0"

# Data directory, settings & time
from lever.workspace import (
    data_root,
    data_path,
    settings_path,
    hooks_config_path,
    log_path,
    export_path,
    load_settings,
    save_settings,
    get_user_timezone,
    now_local,
    start_of_day,
    date_key,
)

# File I/O
from lever.fileio import (
    read_text,
    read_json,
    read_yaml,
    write_text_atomic,
    write_json_atomic,
    write_yaml_atomic,
)

# Models
from lever.models import (
    MAX_TASKS,
    JOURNEY_DAYS,
    DEFAULT_TIMER_DURATION,
    Settings,
    LeverTask,
    TimerState,
    StateSnapshot,
)

# State, persistence, timer
from lever.state import AppState
from lever.storage import StorageService
from lever.timer import TimerService, asyncio_scheduler
from lever.events import Signal
from lever.session import Session

# Hooks & logging
from lever.hooks import run_hooks, load_hooks_config, hook_context
from lever.logs import setup_logging
