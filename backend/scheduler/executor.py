"""Sync pass execution.

Runs every eligible operation in order under the silent execution mode,
timing each one. A failing operation is logged and the pass moves on to
the next one; only a failure to resolve the operation list aborts a pass.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable

from operations import Operation, OperationSetResolver

from .silent import silent_execution
from .sync_log import SyncLog

logger = logging.getLogger(__name__)


@dataclass
class OperationRecord:
    """Outcome of one operation within a pass."""

    label: str
    elapsed_seconds: float
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass
class SyncResult:
    """Result of a sync pass."""

    pass_id: str
    started_at: datetime
    records: list[OperationRecord] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def failed(self) -> list[OperationRecord]:
        return [r for r in self.records if not r.succeeded]

    def to_dict(self) -> dict[str, Any]:
        return {
            "pass_id": self.pass_id,
            "started_at": self.started_at.isoformat(),
            "duration_seconds": round(self.duration_seconds, 6),
            "operations": [
                {
                    "label": r.label,
                    "elapsed_seconds": round(r.elapsed_seconds, 6),
                    "error": r.error,
                }
                for r in self.records
            ],
            "failed": len(self.failed),
        }


class SyncExecutor:
    """Runs sync passes over the resolver's current operation set."""

    def __init__(
        self,
        resolver: OperationSetResolver,
        sync_log: SyncLog | None = None,
        notify: Callable[[str], None] | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            resolver: Source of the operations for each pass
            sync_log: Scratch log for per-operation timings
            notify: Receives transient status notifications
        """
        self.resolver = resolver
        self.sync_log = sync_log if sync_log is not None else SyncLog()
        self.notify = notify or logger.info
        self.last_result: SyncResult | None = None
        self.pass_count = 0
        self._pass_lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._pass_lock.locked()

    def run_pass(self) -> SyncResult | None:
        """Run one sync pass.

        Returns:
            The pass result, or None if a pass was already running
        """
        if not self._pass_lock.acquire(blocking=False):
            logger.warning("Sync pass already running, skipping")
            return None

        try:
            operations = self.resolver.resolve()
            result = SyncResult(
                pass_id=str(uuid.uuid4()),
                started_at=datetime.now(timezone.utc),
            )

            self.notify("Syncing...")
            self.sync_log.add_log(
                result.pass_id,
                "info",
                f"Sync pass started: {len(operations)} operations",
                {"operations": [op.label for op in operations]},
            )

            start = time.perf_counter()
            with silent_execution():
                for op in operations:
                    result.records.append(self._run_operation(result.pass_id, op))
            result.duration_seconds = time.perf_counter() - start

            self.pass_count += 1
            self.last_result = result
            logger.info(
                f"Sync pass finished in {result.duration_seconds:.3f}s "
                f"({len(result.records)} operations, {len(result.failed)} failed)"
            )
            self.notify("Syncing...done")
            return result
        finally:
            self._pass_lock.release()

    def _run_operation(self, pass_id: str, op: Operation) -> OperationRecord:
        logger.debug(f"Running sync operation {op.label}")
        # Written first so a hung operation is visible in the log
        self.sync_log.add_log(
            pass_id, "info", f"{op.label}: running", {"operation": op.label}
        )
        error = None
        start = time.perf_counter()
        try:
            op()
        except Exception as e:
            error = f"{type(e).__name__}: {e}"
            logger.warning(f"Sync operation {op.label} failed: {error}")
        elapsed = time.perf_counter() - start

        record = OperationRecord(label=op.label, elapsed_seconds=elapsed, error=error)
        if error:
            message = f"{op.label}: failed after {elapsed:.3f}s ({error})"
        else:
            message = f"{op.label}: {elapsed:.3f}s"
        self.sync_log.add_log(
            pass_id,
            "error" if error else "info",
            message,
            {"operation": op.label, "elapsed_seconds": elapsed, "error": error},
        )
        return record
