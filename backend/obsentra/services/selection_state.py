"""Thread-safe holder for the currently selected sensor."""

from __future__ import annotations

import threading
from typing import Callable, TypeVar

from obsentra.models import NO_SELECTION

T = TypeVar("T")


class SelectionState:
    """
    Keeps the one shared sensor selection.

    `on_change` is called with the new value while the lock is still held, so
    the write always lands before its broadcast and two racing writers
    broadcast in the same order they wrote.
    """

    def __init__(self, on_change: Callable[[str], None] | None = None):
        self._lock = threading.Lock()
        self._sensor = NO_SELECTION
        self._on_change = on_change

    def get(self) -> str:
        with self._lock:
            return self._sensor

    def set(self, sensor: str) -> str:
        with self._lock:
            self._sensor = sensor
            if self._on_change is not None:
                self._on_change(sensor)
            return sensor

    def read_locked(self, fn: Callable[[str], T]) -> T:
        """Run `fn(current)` with no set() able to slip in between."""
        with self._lock:
            return fn(self._sensor)
