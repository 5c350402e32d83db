"""Host hook points and operation registries.

The host owns two mutable shutdown lists that any component may append to
at any time:

- ``shutdown_hooks``: operations run unconditionally when the host exits
- ``shutdown_queries``: confirmation-style operations run before exit;
  a falsy return value cancels the shutdown

The sync core only reads these lists (fresh on every pass) and, through the
shutdown trimmer, removes entries from them.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator

from .models import NamedOperation, Operation, OperationFunc, as_operation

logger = logging.getLogger(__name__)


class HookList:
    """Ordered, host-owned list of operations."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._operations: list[Operation] = []

    def add(self, operation: Operation | OperationFunc, append: bool = True) -> Operation:
        op = as_operation(operation)
        if op not in self._operations:
            if append:
                self._operations.append(op)
            else:
                self._operations.insert(0, op)
        return op

    def remove(self, item: Operation | str) -> None:
        """Remove an operation, or every operation with the given name.

        Removing an absent entry is a no-op.
        """
        if isinstance(item, str):
            self._operations = [
                op
                for op in self._operations
                if not (isinstance(op, NamedOperation) and op.name == item)
            ]
        elif item in self._operations:
            self._operations.remove(item)

    def list(self) -> tuple[Operation, ...]:
        return tuple(self._operations)

    def names(self) -> list[str]:
        return [op.label for op in self._operations]

    def clear(self) -> None:
        self._operations.clear()

    def __iter__(self) -> Iterator[Operation]:
        return iter(self.list())

    def __len__(self) -> int:
        return len(self._operations)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, str):
            return any(op.matches((item,)) for op in self._operations)
        return item in self._operations


def unresolved_operation(name: str) -> NamedOperation:
    """Placeholder for a configured name with no registered operation."""

    def missing() -> None:
        raise LookupError(f"No operation registered under name: {name}")

    return NamedOperation(name=name, func=missing)


class OperationRegistry:
    """Name lookup for operations configured directly as sync hooks."""

    def __init__(self) -> None:
        self._operations: dict[str, NamedOperation] = {}

    def register(
        self, operation: Operation | OperationFunc, name: str | None = None
    ) -> NamedOperation:
        op = as_operation(operation, name=name)
        if not isinstance(op, NamedOperation):
            raise ValueError("Anonymous operations cannot be registered by name")
        self._operations[op.name] = op
        return op

    def extend(self, operations: Iterable[Operation | OperationFunc]) -> None:
        for operation in operations:
            self.register(operation)

    def unregister(self, name: str) -> bool:
        return self._operations.pop(name, None) is not None

    def get(self, name: str) -> NamedOperation | None:
        return self._operations.get(name)

    def resolve(self, name: str) -> NamedOperation:
        return self._operations.get(name) or unresolved_operation(name)

    def names(self) -> list[str]:
        return list(self._operations)


class HostHooks:
    """The host's native shutdown mechanism and its hook lists."""

    def __init__(self) -> None:
        self.shutdown_hooks = HookList("shutdown_hooks")
        self.shutdown_queries = HookList("shutdown_queries")
        self._before_shutdown: list[Callable[[], None]] = []

    def add_before_shutdown(self, action: Callable[[], None]) -> None:
        if action not in self._before_shutdown:
            self._before_shutdown.append(action)

    def remove_before_shutdown(self, action: Callable[[], None]) -> None:
        if action in self._before_shutdown:
            self._before_shutdown.remove(action)

    def run_shutdown(self) -> bool:
        """Run the host shutdown sequence.

        Pre-shutdown actions run first, then the query operations in order
        (a falsy result cancels the shutdown), then the shutdown hooks.

        Returns:
            False if a query operation cancelled the shutdown
        """
        for action in list(self._before_shutdown):
            action()

        for query in self.shutdown_queries.list():
            if not query():
                logger.info(f"Shutdown cancelled by {query.label}")
                return False

        for hook in self.shutdown_hooks.list():
            try:
                hook()
            except Exception as e:
                logger.warning(f"Shutdown hook {hook.label} failed: {e}")

        logger.info("Shutdown hooks complete")
        return True


# Global host hooks instance
_host_hooks: HostHooks | None = None


def get_host_hooks() -> HostHooks:
    """Get or create the global host hooks instance."""
    global _host_hooks

    if _host_hooks is None:
        _host_hooks = HostHooks()

    return _host_hooks


def reset_host_hooks() -> None:
    """Drop the global host hooks instance."""
    global _host_hooks
    _host_hooks = None
