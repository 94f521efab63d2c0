"""Narrow pub/sub primitives shared by the state and the front-end.

A :class:`Signal` is a single named event with no payload. The composition
root owns each signal; producers call :meth:`Signal.emit` and consumers
register with :meth:`Signal.connect`.

Example usage:
    >>> add_new_task = Signal("add_new_task")
    >>> disconnect = add_new_task.connect(lambda: print("focus the task input"))
    >>> add_new_task.emit()
    focus the task input
    >>> disconnect()
"""

from __future__ import annotations

import logging
from typing import Callable

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


class Signal:
    """A named, payload-less broadcast."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._listeners: list[Listener] = []

    def connect(self, listener: Listener) -> Callable[[], None]:
        """Register *listener*; returns a callable that disconnects it."""
        self._listeners.append(listener)

        def disconnect() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return disconnect

    def emit(self) -> None:
        """Call every listener in registration order.

        A listener that raises is logged and skipped.
        """
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("Listener for signal %r failed", self.name)

    def __len__(self) -> int:
        return len(self._listeners)

    def __repr__(self) -> str:
        return f"Signal({self.name!r}, listeners={len(self._listeners)})"
