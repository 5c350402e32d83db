"""Shutdown trimming for operations the sync mode already covers."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .registry import HookList, HostHooks

if TYPE_CHECKING:
    from scheduler.settings import SyncSettings

logger = logging.getLogger(__name__)


class ShutdownTrimmer:
    """Removes already-synced operations from the host shutdown lists."""

    def __init__(self, settings: SyncSettings, host: HostHooks) -> None:
        self.settings = settings
        self.host = host

    def trim_before_shutdown(self) -> list[str]:
        """Trim the host lists if faster shutdown is enabled.

        Safe to call repeatedly.

        Returns:
            Labels of the removed operations
        """
        if not self.settings.faster_shutdown:
            return []

        removed = self._trim(
            self.host.shutdown_queries, self.settings.shutdown_query_candidates
        )
        removed += self._trim(
            self.host.shutdown_hooks,
            [*self.settings.shutdown_hook_candidates, *self.settings.sync_hooks],
        )
        if removed:
            logger.info(f"Trimmed {len(removed)} operations before shutdown")
        return removed

    @staticmethod
    def _trim(live: HookList, names: list[str]) -> list[str]:
        removed = []
        for op in live.list():
            if op.matches(names):
                live.remove(op)
                removed.append(op.label)
        return removed
