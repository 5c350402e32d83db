"""Data models for sync operations."""
from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, Union

ANONYMOUS_LABEL = "<anonymous>"

OperationFunc = Callable[[], Any]


@dataclass(frozen=True)
class NamedOperation:
    """An operation identified by a stable name."""

    name: str
    func: OperationFunc = field(compare=False)

    @property
    def label(self) -> str:
        return self.name

    def matches(self, names: Iterable[str]) -> bool:
        return self.name in names

    def __call__(self) -> Any:
        return self.func()


@dataclass(frozen=True, eq=False)
class AnonymousOperation:
    """An operation without a usable name.

    Equality is identity, so an anonymous operation only ever matches itself.
    """

    func: OperationFunc

    @property
    def label(self) -> str:
        return ANONYMOUS_LABEL

    def matches(self, names: Iterable[str]) -> bool:
        return False

    def __call__(self) -> Any:
        return self.func()


Operation = Union[NamedOperation, AnonymousOperation]


def as_operation(obj: Operation | OperationFunc, name: str | None = None) -> Operation:
    """Wrap a plain callable as an operation.

    Functions are named by their qualified name, nested functions by their
    plain name. Lambdas and nameless callables become anonymous.
    """
    if isinstance(obj, (NamedOperation, AnonymousOperation)):
        return obj
    if not callable(obj):
        raise TypeError(f"Operation must be callable, got {type(obj).__name__}")
    if name:
        return NamedOperation(name=name, func=obj)

    qualname = getattr(obj, "__qualname__", None) or getattr(obj, "__name__", None)
    if qualname and "<locals>" in qualname:
        qualname = qualname.rsplit(".", 1)[-1]
    if not qualname or qualname == "<lambda>":
        return AnonymousOperation(func=obj)
    return NamedOperation(name=qualname, func=obj)
