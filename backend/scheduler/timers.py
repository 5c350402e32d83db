"""Timer primitives backed by APScheduler.

Two kinds of timers drive the sync mode:

- periodic timers run a callback every N seconds, starting N seconds
  from now
- idle timers run a callback once the user has been continuously inactive
  for N seconds, either once (one-shot) or once per idle stretch (repeating)

An idle timer armed while the user has already been idle for longer than
its delay waits for the next activity before counting again.
"""

from __future__ import annotations

import logging
import threading
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable

from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.jobstores.base import JobLookupError
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger

from .activity import ActivityMonitor

logger = logging.getLogger(__name__)


class TimerKind(str, Enum):
    """Timer trigger type."""

    IDLE = "idle"
    PERIODIC = "periodic"


class TimerResource:
    """One scheduled future invocation."""

    kind: TimerKind

    def __init__(self, seconds: float, repeat: bool, func: Callable[[], Any]) -> None:
        self.timer_id = str(uuid.uuid4())
        self.seconds = seconds
        self.repeat = repeat
        self.func = func
        self.armed_at = datetime.now(timezone.utc)
        self.active = True

    def matches(self, seconds: float, repeat: bool) -> bool:
        """Check if this timer is armed with exactly this configuration."""
        return self.active and self.seconds == seconds and self.repeat == repeat

    def cancel(self) -> None:
        self.active = False

    @property
    def next_run_time(self) -> datetime | None:
        return None

    def describe(self) -> dict[str, Any]:
        next_run = self.next_run_time
        return {
            "id": self.timer_id,
            "kind": self.kind.value,
            "seconds": self.seconds,
            "repeat": self.repeat,
            "active": self.active,
            "armed_at": self.armed_at.isoformat(),
            "next_run_time": next_run.isoformat() if next_run else None,
        }

    def _invoke(self) -> None:
        try:
            self.func()
        except Exception as e:
            # The timer stays armed; the next tick is the retry
            logger.error(f"{self.kind.value} timer callback failed: {e}", exc_info=True)

    def __repr__(self) -> str:
        state = "active" if self.active else "cancelled"
        return f"<{type(self).__name__} {self.seconds}s repeat={self.repeat} {state}>"


class TimerBackend(ABC):
    """Host timer facilities used by the coordinator."""

    @abstractmethod
    def run_with_idle_timer(
        self, seconds: float, repeat: bool, func: Callable[[], Any]
    ) -> TimerResource:
        """Run ``func`` after ``seconds`` of continuous inactivity."""

    @abstractmethod
    def run_with_timer(self, seconds: float, func: Callable[[], Any]) -> TimerResource:
        """Run ``func`` every ``seconds``, starting ``seconds`` from now."""

    @abstractmethod
    def idle_seconds(self) -> float:
        """Seconds since the last user activity."""

    @abstractmethod
    def record_activity(self) -> None:
        """Mark user input now."""

    def start(self) -> None:
        pass

    def shutdown(self, wait: bool = True) -> None:
        pass


class PeriodicTimer(TimerResource):
    """Interval timer scheduled as a single APScheduler job."""

    kind = TimerKind.PERIODIC

    def __init__(
        self,
        scheduler: BackgroundScheduler,
        seconds: float,
        func: Callable[[], Any],
    ) -> None:
        super().__init__(seconds, True, func)
        self._scheduler = scheduler
        self._job = scheduler.add_job(
            self._invoke,
            trigger=IntervalTrigger(seconds=seconds),
            id=f"sync-periodic-{self.timer_id}",
            name=f"periodic sync check every {seconds}s",
        )

    @property
    def job_id(self) -> str:
        return self._job.id

    @property
    def next_run_time(self) -> datetime | None:
        job = self._scheduler.get_job(self._job.id)
        return job.next_run_time if job else None

    def cancel(self) -> None:
        if not self.active:
            return
        super().cancel()
        try:
            self._scheduler.remove_job(self._job.id)
        except JobLookupError:
            pass


class IdleTimer(TimerResource):
    """Idle timer planned as one-off APScheduler jobs.

    A job is planned for the moment the current idle stretch would reach
    the delay, and re-planned on every recorded activity.
    """

    kind = TimerKind.IDLE

    def __init__(
        self,
        scheduler: BackgroundScheduler,
        monitor: ActivityMonitor,
        seconds: float,
        repeat: bool,
        func: Callable[[], Any],
    ) -> None:
        super().__init__(seconds, repeat, func)
        self._scheduler = scheduler
        self._monitor = monitor
        self._lock = threading.Lock()
        self._job_id: str | None = None

        idle = monitor.idle_seconds()
        if idle < seconds:
            with self._lock:
                self._plan(seconds - idle)
        # Already idle past the delay: wait for the next idle stretch
        monitor.subscribe(self._on_activity)

    @property
    def job_id(self) -> str | None:
        return self._job_id

    @property
    def waiting_for_activity(self) -> bool:
        return self.active and self._job_id is None

    @property
    def next_run_time(self) -> datetime | None:
        if not self._job_id:
            return None
        job = self._scheduler.get_job(self._job_id)
        return job.next_run_time if job else None

    def cancel(self) -> None:
        if not self.active:
            return
        super().cancel()
        self._monitor.unsubscribe(self._on_activity)
        with self._lock:
            self._unplan()

    def _plan(self, delay: float) -> None:
        self._unplan()
        run_date = datetime.now(timezone.utc) + timedelta(seconds=max(0.0, delay))
        job = self._scheduler.add_job(
            self._fire,
            trigger=DateTrigger(run_date=run_date),
            id=f"sync-idle-{self.timer_id}-{uuid.uuid4().hex[:8]}",
            name=f"idle sync after {self.seconds}s",
        )
        self._job_id = job.id

    def _unplan(self) -> None:
        if self._job_id:
            try:
                self._scheduler.remove_job(self._job_id)
            except JobLookupError:
                pass
            self._job_id = None

    def _on_activity(self) -> None:
        with self._lock:
            if self.active:
                self._plan(self.seconds)

    def _fire(self) -> None:
        with self._lock:
            self._job_id = None
            if not self.active:
                return
            idle = self._monitor.idle_seconds()
            if idle < self.seconds:
                # Activity happened after this job was planned
                self._plan(self.seconds - idle)
                return

        if not self.repeat:
            self.cancel()
        self._invoke()


class APSchedulerBackend(TimerBackend):
    """Timer backend running on an APScheduler background scheduler.

    A single worker thread executes every timer callback, so callbacks
    never overlap. Jobs live in memory only; nothing survives a restart.
    """

    def __init__(self, monitor: ActivityMonitor | None = None) -> None:
        self.monitor = monitor or ActivityMonitor()
        self._scheduler: BackgroundScheduler | None = None
        self._started = False

    def _create_scheduler(self) -> BackgroundScheduler:
        """Create and configure the APScheduler instance."""
        jobstores = {"default": MemoryJobStore()}

        # One worker keeps passes and reconciliation serialized
        executors = {
            "default": ThreadPoolExecutor(max_workers=1),
        }

        job_defaults = {
            "coalesce": True,  # Combine missed runs into one
            "max_instances": 1,  # Only one instance per job
            "misfire_grace_time": None,  # Late runs still happen
        }

        return BackgroundScheduler(
            jobstores=jobstores,
            executors=executors,
            job_defaults=job_defaults,
            timezone="UTC",
        )

    def start(self, paused: bool = False) -> None:
        """Start the scheduler."""
        if self._started:
            logger.warning("Scheduler already started")
            return

        self._scheduler = self._create_scheduler()
        self._scheduler.start(paused=paused)
        self._started = True
        logger.info("Timer scheduler started")

    def shutdown(self, wait: bool = True) -> None:
        """Shutdown the scheduler.

        Args:
            wait: Whether to wait for a running callback to complete
        """
        if self._scheduler and self._started:
            self._scheduler.shutdown(wait=wait)
            self._started = False
            logger.info("Timer scheduler shutdown")

    @property
    def is_running(self) -> bool:
        return self._started and self._scheduler is not None

    @property
    def scheduler(self) -> BackgroundScheduler:
        if not self._scheduler or not self._started:
            raise RuntimeError("Scheduler not started")
        return self._scheduler

    def run_with_idle_timer(
        self, seconds: float, repeat: bool, func: Callable[[], Any]
    ) -> IdleTimer:
        return IdleTimer(self.scheduler, self.monitor, seconds, repeat, func)

    def run_with_timer(self, seconds: float, func: Callable[[], Any]) -> PeriodicTimer:
        return PeriodicTimer(self.scheduler, seconds, func)

    def idle_seconds(self) -> float:
        return self.monitor.idle_seconds()

    def record_activity(self) -> None:
        self.monitor.record_activity()

    def get_jobs(self) -> list[dict[str, Any]]:
        """Get all planned timer jobs."""
        if not self._scheduler:
            return []

        return [
            {
                "id": job.id,
                "name": job.name,
                "next_run_time": job.next_run_time.isoformat()
                if job.next_run_time
                else None,
                "trigger": str(job.trigger),
            }
            for job in self._scheduler.get_jobs()
        ]
