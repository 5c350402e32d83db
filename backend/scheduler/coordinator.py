"""Timer coordination for the sync mode.

The coordinator owns at most one idle timer and one periodic timer and
reconciles them against the configured delays on every tick:

    idle_delay >= periodic_delay            (idle-only)
        no periodic timer; a repeating idle timer calls reconcile(),
        which fires a pass once the user has been idle long enough

    idle_delay < periodic_delay             (periodic)
        a periodic timer calls reconcile() every periodic_delay; each tick
        arms a one-shot idle timer that runs the pass directly after
        idle_delay of inactivity, unless the user has been idle for more
        than a whole period (that idle stretch is already covered)

Timers that already match the wanted configuration are left alone, so
reconciling never double-arms or drifts.
"""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Any, Callable

from .settings import SyncSettings
from .timers import TimerBackend, TimerResource

logger = logging.getLogger(__name__)


class Decision(str, Enum):
    """Outcome of one reconciliation."""

    FIRE = "fire"
    ARM_IDLE = "arm_idle"
    ARM_ONE_SHOT = "arm_one_shot"
    ARM_PERIODIC = "arm_periodic"
    SKIP = "skip"


class CoordinatorState(str, Enum):
    """Which timers are currently armed."""

    DISABLED = "disabled"
    IDLE_ONLY = "idle_only"
    PERIODIC_PENDING = "periodic_pending"  # one-shot idle timer pending
    PERIODIC_WAITING = "periodic_waiting"


class TimerCoordinator:
    """Decides when to run sync passes."""

    def __init__(
        self,
        settings: SyncSettings,
        backend: TimerBackend,
        run_pass: Callable[[], Any],
    ) -> None:
        self.settings = settings
        self.backend = backend
        self.run_pass = run_pass
        self.idle_timer: TimerResource | None = None
        self.periodic_timer: TimerResource | None = None
        self._lock = threading.RLock()

    @property
    def state(self) -> CoordinatorState:
        periodic = self.periodic_timer is not None and self.periodic_timer.active
        idle = self.idle_timer is not None and self.idle_timer.active
        if periodic:
            if idle and not self.idle_timer.repeat:
                return CoordinatorState.PERIODIC_PENDING
            return CoordinatorState.PERIODIC_WAITING
        if idle and self.idle_timer.repeat:
            return CoordinatorState.IDLE_ONLY
        return CoordinatorState.DISABLED

    def reconcile(self) -> Decision:
        """Fire a pass or (re)arm timers for the current settings."""
        with self._lock:
            return self._reconcile()

    def _reconcile(self) -> Decision:
        idle = self.backend.idle_seconds()
        idle_delay = self.settings.idle_delay
        periodic_delay = self.settings.periodic_delay

        if idle_delay >= periodic_delay:
            self._cancel_periodic()
            if self._idle_timer_matches(idle_delay, repeat=True):
                if idle < idle_delay:
                    return Decision.SKIP
                logger.debug(f"Idle for {idle:.1f}s, running sync pass")
                self.run_pass()
                return Decision.FIRE
            self._arm_idle(idle_delay, repeat=True, func=self.reconcile)
            return Decision.ARM_IDLE

        # Leftover from idle-only mode; a pending one-shot is kept
        if self.idle_timer is not None and self.idle_timer.repeat:
            self._cancel_idle()

        if self.periodic_timer is not None and self.periodic_timer.matches(
            periodic_delay, repeat=True
        ):
            if idle > periodic_delay:
                logger.debug(
                    f"Idle for {idle:.1f}s, longer than one period; skipping tick"
                )
                return Decision.SKIP
            self._arm_idle(idle_delay, repeat=False, func=self.run_pass)
            return Decision.ARM_ONE_SHOT

        self._cancel_periodic()
        self.periodic_timer = self.backend.run_with_timer(periodic_delay, self.reconcile)
        logger.info(f"Armed periodic sync check every {periodic_delay}s")
        return Decision.ARM_PERIODIC

    def cancel(self) -> None:
        """Cancel both timers."""
        with self._lock:
            self._cancel_idle()
            self._cancel_periodic()

    def describe(self) -> dict[str, Any]:
        return {
            "state": self.state.value,
            "idle_timer": self.idle_timer.describe()
            if self.idle_timer and self.idle_timer.active
            else None,
            "periodic_timer": self.periodic_timer.describe()
            if self.periodic_timer and self.periodic_timer.active
            else None,
        }

    def _idle_timer_matches(self, seconds: float, repeat: bool) -> bool:
        return self.idle_timer is not None and self.idle_timer.matches(seconds, repeat)

    def _arm_idle(self, seconds: float, repeat: bool, func: Callable[[], Any]) -> None:
        self._cancel_idle()
        self.idle_timer = self.backend.run_with_idle_timer(seconds, repeat, func)
        kind = "repeating" if repeat else "one-shot"
        logger.debug(f"Armed {kind} idle timer at {seconds}s")

    def _cancel_idle(self) -> None:
        if self.idle_timer is not None:
            self.idle_timer.cancel()
            self.idle_timer = None

    def _cancel_periodic(self) -> None:
        if self.periodic_timer is not None:
            self.periodic_timer.cancel()
            self.periodic_timer = None
