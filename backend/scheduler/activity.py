"""User activity tracking for idle timers."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class ActivityMonitor:
    """Tracks the time since the last user input.

    The host calls ``record_activity`` on every input event. Idle timers
    subscribe to be told when an idle stretch ends.
    """

    def __init__(self, clock: Clock = time.monotonic) -> None:
        self.clock = clock
        self._last_activity = clock()
        self._listeners: list[Callable[[], None]] = []
        self._lock = threading.Lock()

    @property
    def last_activity(self) -> float:
        return self._last_activity

    def idle_seconds(self) -> float:
        """Seconds of continuous inactivity."""
        return max(0.0, self.clock() - self._last_activity)

    def record_activity(self) -> None:
        """Mark user input now and notify idle timers."""
        with self._lock:
            self._last_activity = self.clock()
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener()
            except Exception as e:
                logger.error(f"Activity listener failed: {e}", exc_info=True)

    def subscribe(self, listener: Callable[[], None]) -> None:
        with self._lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def unsubscribe(self, listener: Callable[[], None]) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)
