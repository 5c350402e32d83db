"""The continuous sync mode.

Wires the resolver, executor, coordinator, and shutdown trimmer together
and provides the enable/disable lifecycle.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable

from operations import (
    HostHooks,
    OperationRegistry,
    OperationSetResolver,
    ShutdownTrimmer,
    get_host_hooks,
)

from .coordinator import Decision, TimerCoordinator
from .executor import SyncExecutor, SyncResult
from .settings import SyncSettings
from .sync_log import SyncLog
from .timers import APSchedulerBackend, TimerBackend

logger = logging.getLogger(__name__)


class SyncMode:
    """Periodically syncs the eligible operations while enabled.

    Usage:
        mode = SyncMode()
        mode.backend.start()
        mode.registry.register(save_history)
        mode.settings.sync_hooks = ["save_history"]
        mode.enable()
    """

    def __init__(
        self,
        settings: SyncSettings | None = None,
        backend: TimerBackend | None = None,
        host: HostHooks | None = None,
        registry: OperationRegistry | None = None,
        sync_log: SyncLog | None = None,
        notify: Callable[[str], None] | None = None,
    ) -> None:
        self.settings = settings or SyncSettings()
        self.backend = backend or APSchedulerBackend()
        self.host = host or get_host_hooks()
        self.registry = registry or OperationRegistry()

        self.resolver = OperationSetResolver(self.settings, self.host, self.registry)
        self.executor = SyncExecutor(self.resolver, sync_log, notify)
        self.trimmer = ShutdownTrimmer(self.settings, self.host)
        self.coordinator = TimerCoordinator(self.settings, self.backend, self.run_pass)

        self._enabled = False
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def sync_log(self) -> SyncLog:
        return self.executor.sync_log

    def enable(self) -> None:
        """Arm the timers and install the shutdown trimmer."""
        with self._lock:
            if self._enabled:
                logger.warning("Sync mode already enabled")
                return
            self.coordinator.reconcile()
            self.host.add_before_shutdown(self.trimmer.trim_before_shutdown)
            self._enabled = True
        logger.info(
            f"Sync mode enabled (idle_delay={self.settings.idle_delay}s, "
            f"periodic_delay={self.settings.periodic_delay}s)"
        )

    def disable(self) -> None:
        """Cancel both timers. A pass already running is not interrupted."""
        with self._lock:
            if not self._enabled:
                return
            self.coordinator.cancel()
            self.host.remove_before_shutdown(self.trimmer.trim_before_shutdown)
            self._enabled = False
        logger.info("Sync mode disabled")

    def reconcile(self) -> Decision:
        return self.coordinator.reconcile()

    def run_pass(self) -> SyncResult | None:
        return self.executor.run_pass()

    def record_activity(self) -> None:
        self.backend.record_activity()

    def update_settings(self, **changes: Any) -> SyncSettings:
        """Validate and apply setting changes all at once.

        Raises:
            pydantic.ValidationError: if any value is invalid; nothing is applied
            ValueError: if a setting name is unknown
        """
        unknown = set(changes) - set(SyncSettings.model_fields)
        if unknown:
            raise ValueError(f"Unknown sync settings: {sorted(unknown)}")
        merged = SyncSettings.model_validate({**self.settings.model_dump(), **changes})
        for name in changes:
            setattr(self.settings, name, getattr(merged, name))
        logger.info(f"Sync settings updated: {sorted(changes)}")
        return self.settings

    def status(self) -> dict[str, Any]:
        last = self.executor.last_result
        return {
            "enabled": self._enabled,
            "idle_seconds": round(self.backend.idle_seconds(), 3),
            "pass_running": self.executor.is_running,
            "pass_count": self.executor.pass_count,
            "last_pass": last.to_dict() if last else None,
            **self.coordinator.describe(),
        }

    def shutdown(self, wait: bool = True) -> None:
        """Disable the mode and stop the timer backend."""
        self.disable()
        self.backend.shutdown(wait=wait)


# Global sync mode instance
_sync_mode_instance: SyncMode | None = None


def get_sync_mode(settings: SyncSettings | None = None) -> SyncMode:
    """Get or create the global sync mode.

    Args:
        settings: Settings to use (only used on first call)

    Returns:
        Global SyncMode instance
    """
    global _sync_mode_instance

    if _sync_mode_instance is None:
        _sync_mode_instance = SyncMode(settings)

    return _sync_mode_instance


def start_sync_mode(settings: SyncSettings | None = None, enable: bool = True) -> SyncMode:
    """Start the global sync mode's timers and optionally enable it.

    Args:
        settings: Settings to use on first call
        enable: Whether to arm the timers right away

    Returns:
        Started sync mode
    """
    mode = get_sync_mode(settings)
    mode.backend.start()
    if enable:
        mode.enable()
    return mode


def shutdown_sync_mode(wait: bool = True) -> None:
    """Shutdown the global sync mode.

    Args:
        wait: Whether to wait for a running pass
    """
    global _sync_mode_instance

    if _sync_mode_instance:
        _sync_mode_instance.shutdown(wait=wait)
        _sync_mode_instance = None
