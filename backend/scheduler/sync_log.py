"""In-memory scratch log for sync passes.

Keeps the most recent entries only. Entries are also forwarded to the
``scheduler.sync_log`` logger at DEBUG level.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LogEntry:
    """A single scratch log line."""

    timestamp: datetime
    pass_id: str
    level: str
    message: str
    context: dict[str, Any] = field(default_factory=dict)

    def format(self) -> str:
        return f"[{self.timestamp.strftime('%Y-%m-%d %H:%M:%S')}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "pass_id": self.pass_id,
            "level": self.level,
            "message": self.message,
            "context": self.context,
        }


class SyncLog:
    """Bounded buffer of sync pass log entries."""

    def __init__(self, max_entries: int | None = None) -> None:
        self._entries: deque[LogEntry] = deque(
            maxlen=max_entries if max_entries is not None else config.SYNC_LOG_SIZE
        )
        self._lock = threading.Lock()

    def add_log(
        self,
        pass_id: str,
        level: str,
        message: str,
        context: dict[str, Any] | None = None,
    ) -> LogEntry:
        """Append an entry for a pass.

        Args:
            pass_id: Pass the entry belongs to
            level: Log level (debug, info, warning, error)
            message: Log message
            context: Additional structured data
        """
        entry = LogEntry(
            timestamp=datetime.now(timezone.utc),
            pass_id=pass_id,
            level=level,
            message=message,
            context=context or {},
        )
        with self._lock:
            self._entries.append(entry)
        logger.debug(f"[{pass_id[:8]}] {message}")
        return entry

    def entries(self, pass_id: str | None = None, limit: int | None = None) -> list[LogEntry]:
        """Get log entries, oldest first.

        Args:
            pass_id: Only entries for this pass
            limit: Only the most recent ``limit`` entries
        """
        with self._lock:
            entries = list(self._entries)
        if pass_id:
            entries = [e for e in entries if e.pass_id == pass_id]
        if limit is not None:
            entries = entries[-limit:] if limit > 0 else []
        return entries

    def lines(self, limit: int | None = None) -> list[str]:
        return [entry.format() for entry in self.entries(limit=limit)]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
