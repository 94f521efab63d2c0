"""Logging setup for Lever.

The terminal front-end owns the screen, so records go to a rotating file in
the data directory rather than to the console.
"""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from lever.workspace import log_path

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
MAX_BYTES = 1024 * 1024
BACKUP_COUNT = 3
HANDLER_NAME = "lever-file"


def setup_logging(log_level: str = "INFO", log_file: Path | None = None) -> Path:
    """Route the root logger to a rotating log file. Returns the file path."""
    if log_file is None:
        log_file = log_path()
    log_file.parent.mkdir(parents=True, exist_ok=True)

    level = getattr(logging, log_level.upper(), logging.INFO)

    handler = logging.handlers.RotatingFileHandler(
        log_file, maxBytes=MAX_BYTES, backupCount=BACKUP_COUNT, encoding="utf-8"
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.set_name(HANDLER_NAME)

    root_logger = logging.getLogger()
    for old in [h for h in root_logger.handlers if h.get_name() == HANDLER_NAME]:
        root_logger.removeHandler(old)
        old.close()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    return log_file
