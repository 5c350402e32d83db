"""Scoped non-interactive execution for sync operations.

Operations that would normally talk to the user consult the current
execution mode instead: ``confirm`` answers yes without prompting,
``status`` messages are dropped, and file writers skip the
modification-time conflict check. Everything is restored when the
scope exits, including when an operation raises.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Iterator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecutionMode:
    """How operations may interact with the user."""

    interactive: bool = True
    auto_confirm: bool = False
    status_messages: bool = True
    check_file_mtime: bool = True


SILENT = ExecutionMode(
    interactive=False,
    auto_confirm=True,
    status_messages=False,
    check_file_mtime=False,
)

_current_mode: ContextVar[ExecutionMode] = ContextVar(
    "execution_mode", default=ExecutionMode()
)


def current_mode() -> ExecutionMode:
    return _current_mode.get()


@contextmanager
def silent_execution(mode: ExecutionMode = SILENT) -> Iterator[ExecutionMode]:
    """Run the enclosed block without prompts or status output.

    Only the current context sees the mode. Process-wide streams such as
    sys.stdout are left alone, so other threads keep their output.
    """
    token = _current_mode.set(mode)
    try:
        yield mode
    finally:
        _current_mode.reset(token)


def confirm(prompt: str) -> bool:
    """Ask the user a yes/no question, or answer yes in silent mode."""
    mode = current_mode()
    if mode.auto_confirm:
        return True
    if not mode.interactive:
        return False
    answer = input(f"{prompt} (yes or no) ")
    return answer.strip().lower() in ("y", "yes")


def status(message: str) -> None:
    """Show a transient status message unless suppressed."""
    if current_mode().status_messages:
        logger.info(message)