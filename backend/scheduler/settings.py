"""Runtime settings for the sync mode.

Settings are read fresh by the coordinator, resolver, and trimmer every
time they act, so assignments take effect on the next reconciliation
without re-enabling the mode. Invalid values are rejected on assignment.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

import config


class SyncSettings(BaseModel):
    """Configuration for the sync mode."""

    model_config = ConfigDict(validate_assignment=True)

    # Minimum continuous idle time before a pass (seconds)
    idle_delay: float = Field(default=config.IDLE_DELAY, ge=0)
    # Minimum interval between periodic checks (seconds); 0 disables
    periodic_delay: float = Field(default=config.PERIODIC_DELAY, ge=0)
    faster_shutdown: bool = config.FASTER_SHUTDOWN

    # Names worth syncing whenever the host registers them for shutdown
    shutdown_hook_candidates: list[str] = Field(
        default_factory=lambda: list(config.SHUTDOWN_HOOK_CANDIDATES)
    )
    shutdown_query_candidates: list[str] = Field(
        default_factory=lambda: list(config.SHUTDOWN_QUERY_CANDIDATES)
    )
    # Names always run on each pass
    sync_hooks: list[str] = Field(default_factory=lambda: list(config.SYNC_HOOKS))

    @field_validator(
        "shutdown_hook_candidates", "shutdown_query_candidates", "sync_hooks"
    )
    @classmethod
    def strip_names(cls, v: list[str]) -> list[str]:
        names = [name.strip() for name in v]
        if any(not name for name in names):
            raise ValueError("Operation names must not be empty")
        return names

    @property
    def idle_only(self) -> bool:
        """Whether the idle delay alone decides when passes run."""
        return self.idle_delay >= self.periodic_delay
