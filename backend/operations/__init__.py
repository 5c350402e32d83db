"""Operation sets for the sync mode.

Models the host's shutdown hook lists and computes which of their
operations are eligible to run on each sync pass.
"""

from .models import ANONYMOUS_LABEL, AnonymousOperation, NamedOperation, Operation, as_operation
from .registry import (
    HookList,
    HostHooks,
    OperationRegistry,
    get_host_hooks,
    reset_host_hooks,
)
from .resolver import OperationSetResolver
from .trimmer import ShutdownTrimmer

__all__ = [
    "ANONYMOUS_LABEL",
    "AnonymousOperation",
    "NamedOperation",
    "Operation",
    "as_operation",
    "HookList",
    "HostHooks",
    "OperationRegistry",
    "get_host_hooks",
    "reset_host_hooks",
    "OperationSetResolver",
    "ShutdownTrimmer",
]
