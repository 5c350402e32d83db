"""Pytest configuration and fixtures."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any, Callable

import pytest

# Add backend to path for imports
backend_path = str(Path(__file__).parent.parent / "backend")
if backend_path not in sys.path:
    sys.path.insert(0, backend_path)

# Keep the app from arming real timers on import-time defaults
os.environ.setdefault("SYNC_ENABLED", "false")

from operations import HostHooks, OperationRegistry  # noqa: E402
from scheduler import SyncMode, SyncSettings  # noqa: E402
from scheduler.timers import TimerBackend, TimerKind, TimerResource  # noqa: E402


class FakeTimer(TimerResource):
    """Timer driven by FakeTimerBackend's manual clock."""

    def __init__(
        self,
        backend: FakeTimerBackend,
        kind: TimerKind,
        seconds: float,
        repeat: bool,
        func: Callable[[], Any],
    ) -> None:
        super().__init__(seconds, repeat, func)
        self.kind = kind
        self.backend = backend
        self.fire_count = 0
        # Periodic timers: next due time. Idle timers: fired this idle stretch
        self.next_due = backend.now + seconds
        self.fired_this_stretch = backend.idle_seconds() >= seconds

    def cancel(self) -> None:
        super().cancel()
        if self in self.backend.timers:
            self.backend.timers.remove(self)

    def due_at(self) -> float | None:
        if self.kind is TimerKind.PERIODIC:
            return self.next_due
        if self.fired_this_stretch:
            return None
        return self.backend.last_activity + self.seconds

    def fire(self) -> None:
        self.fire_count += 1
        if self.kind is TimerKind.PERIODIC:
            self.next_due += self.seconds
        else:
            self.fired_this_stretch = True
            if not self.repeat:
                self.cancel()
        self._invoke()


class FakeTimerBackend(TimerBackend):
    """Deterministic timer backend with a manual clock.

    Idle timers fire once per idle stretch; an idle timer armed while the
    user is already idle past its delay waits for the next activity.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self.last_activity = 0.0
        self.timers: list[FakeTimer] = []
        self.created: list[FakeTimer] = []

    def run_with_idle_timer(
        self, seconds: float, repeat: bool, func: Callable[[], Any]
    ) -> FakeTimer:
        return self._add(FakeTimer(self, TimerKind.IDLE, seconds, repeat, func))

    def run_with_timer(self, seconds: float, func: Callable[[], Any]) -> FakeTimer:
        return self._add(FakeTimer(self, TimerKind.PERIODIC, seconds, True, func))

    def idle_seconds(self) -> float:
        return self.now - self.last_activity

    def record_activity(self) -> None:
        self.last_activity = self.now
        for timer in self.timers:
            if timer.kind is TimerKind.IDLE:
                timer.fired_this_stretch = False

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing due timers in time order."""
        target = self.now + seconds
        while True:
            due = [(t.due_at(), i, t) for i, t in enumerate(self.timers) if t.due_at() is not None]
            due = [(when, i, t) for when, i, t in due if when <= target]
            if not due:
                break
            when, _, timer = min(due, key=lambda item: (item[0], item[1]))
            self.now = max(self.now, when)
            timer.fire()
        self.now = target

    def active(self, kind: TimerKind) -> list[FakeTimer]:
        return [t for t in self.timers if t.kind is kind and t.active]

    def _add(self, timer: FakeTimer) -> FakeTimer:
        self.timers.append(timer)
        self.created.append(timer)
        return timer


@pytest.fixture
def fake_backend() -> FakeTimerBackend:
    """Timer backend with a manual clock."""
    return FakeTimerBackend()


@pytest.fixture
def host() -> HostHooks:
    """Fresh host hook lists."""
    return HostHooks()


@pytest.fixture
def registry() -> OperationRegistry:
    """Empty operation registry."""
    return OperationRegistry()


@pytest.fixture
def settings() -> SyncSettings:
    """Settings with empty operation lists."""
    return SyncSettings(
        idle_delay=10,
        periodic_delay=60,
        faster_shutdown=True,
        shutdown_hook_candidates=[],
        shutdown_query_candidates=[],
        sync_hooks=[],
    )


@pytest.fixture
def sync_mode(
    settings: SyncSettings,
    fake_backend: FakeTimerBackend,
    host: HostHooks,
    registry: OperationRegistry,
) -> SyncMode:
    """Sync mode wired to the fake timer backend."""
    return SyncMode(
        settings=settings,
        backend=fake_backend,
        host=host,
        registry=registry,
        notify=lambda message: None,
    )


@pytest.fixture
def calls() -> list[str]:
    """Records operation invocations in order."""
    return []


@pytest.fixture
def make_op(calls: list[str]) -> Callable[..., Callable[[], None]]:
    """Build a named function that records its calls."""

    def factory(name: str, fail: bool = False) -> Callable[[], None]:
        def op() -> None:
            calls.append(name)
            if fail:
                raise RuntimeError(f"{name} failed")

        op.__name__ = name
        op.__qualname__ = name
        return op

    return factory
