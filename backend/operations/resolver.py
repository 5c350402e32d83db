"""Computes the operations eligible for the next sync pass."""
from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from .models import Operation
from .registry import HookList, HostHooks, OperationRegistry

if TYPE_CHECKING:
    from scheduler.settings import SyncSettings


def intersect(live: HookList, candidates: Sequence[str]) -> list[Operation]:
    """Return the live operations named in ``candidates``, in live order."""
    return [op for op in live.list() if op.matches(candidates)]


class OperationSetResolver:
    """Read-through view over the host lists and the configured names.

    Nothing is cached between calls: the host may add or remove hooks at
    any time.
    """

    def __init__(
        self,
        settings: SyncSettings,
        host: HostHooks,
        registry: OperationRegistry,
    ) -> None:
        self.settings = settings
        self.host = host
        self.registry = registry

    def resolve(self) -> list[Operation]:
        """Queries first, then shutdown hooks, then the sync hooks.

        Duplicates across the three groups are kept.
        """
        queries = intersect(
            self.host.shutdown_queries, self.settings.shutdown_query_candidates
        )
        hooks = intersect(
            self.host.shutdown_hooks, self.settings.shutdown_hook_candidates
        )
        sync_hooks = [self.registry.resolve(name) for name in self.settings.sync_hooks]
        return queries + hooks + sync_hooks
