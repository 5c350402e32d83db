"""Timer-driven sync passes.

Runs the eligible persistence operations whenever the user has been idle
long enough, with a periodic check as a fallback. Timers run on APScheduler
and live in memory only; they are rebuilt each time the mode is enabled.
"""

from .activity import ActivityMonitor
from .coordinator import CoordinatorState, Decision, TimerCoordinator
from .executor import OperationRecord, SyncExecutor, SyncResult
from .mode import (
    SyncMode,
    get_sync_mode,
    shutdown_sync_mode,
    start_sync_mode,
)
from .settings import SyncSettings
from .silent import ExecutionMode, confirm, current_mode, silent_execution, status
from .sync_log import LogEntry, SyncLog
from .timers import (
    APSchedulerBackend,
    IdleTimer,
    PeriodicTimer,
    TimerBackend,
    TimerKind,
    TimerResource,
)

__all__ = [
    "ActivityMonitor",
    "CoordinatorState",
    "Decision",
    "TimerCoordinator",
    "OperationRecord",
    "SyncExecutor",
    "SyncResult",
    "SyncMode",
    "get_sync_mode",
    "shutdown_sync_mode",
    "start_sync_mode",
    "SyncSettings",
    # Silent execution
    "ExecutionMode",
    "confirm",
    "current_mode",
    "silent_execution",
    "status",
    "LogEntry",
    "SyncLog",
    # Timers
    "APSchedulerBackend",
    "IdleTimer",
    "PeriodicTimer",
    "TimerBackend",
    "TimerKind",
    "TimerResource",
]
