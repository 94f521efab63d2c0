"""Shared test fixtures for Lever tests."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable

import pytest
import yaml

from lever.state import AppState
from lever.storage import StorageService


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create a temporary data directory pinned to UTC."""
    root = tmp_path / "Lever"
    root.mkdir(parents=True)

    settings = {"timezone": "UTC", "log_level": "DEBUG"}
    (root / "settings.yaml").write_text(
        yaml.dump(settings, default_flow_style=False), encoding="utf-8"
    )

    # Set env var
    os.environ["LEVER_HOME"] = str(root)
    yield root
    # Cleanup
    if "LEVER_HOME" in os.environ:
        del os.environ["LEVER_HOME"]


@pytest.fixture
def storage(workspace: Path) -> StorageService:
    return StorageService(workspace)


@pytest.fixture
def state(storage: StorageService) -> AppState:
    return AppState(storage)


class ManualHandle:
    def __init__(self, callback: Callable[[], None]) -> None:
        self.callback = callback
        self.stopped = False

    def stop(self) -> None:
        self.stopped = True


class ManualScheduler:
    """Stands in for a periodic tick source; ``fire()`` delivers ticks."""

    def __init__(self) -> None:
        self.handles: list[ManualHandle] = []
        self.intervals: list[float] = []

    def __call__(self, interval: float, callback: Callable[[], None]) -> ManualHandle:
        handle = ManualHandle(callback)
        self.handles.append(handle)
        self.intervals.append(interval)
        return handle

    @property
    def active(self) -> list[ManualHandle]:
        return [h for h in self.handles if not h.stopped]

    def fire(self, times: int = 1) -> None:
        for _ in range(times):
            for handle in self.active:
                handle.callback()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()
