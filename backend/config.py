"""Shared configuration for the continuous sync backend.

This module centralizes environment variable access and default values
to prevent drift between modules.
"""

import os


def _env_list(name: str) -> list[str]:
    """Read a comma-separated list of operation names."""
    raw = os.getenv(name, "")
    return [item.strip() for item in raw.split(",") if item.strip()]


# Timer configuration (seconds)
IDLE_DELAY = float(os.getenv("SYNC_IDLE_DELAY", "10"))
PERIODIC_DELAY = float(os.getenv("SYNC_PERIODIC_DELAY", "300"))

# Enable the sync mode when the application starts
SYNC_ENABLED = os.getenv("SYNC_ENABLED", "true").lower() == "true"

# Remove already-synced operations from the shutdown hooks before exit
FASTER_SHUTDOWN = os.getenv("SYNC_FASTER_SHUTDOWN", "true").lower() == "true"

# Number of lines kept in the in-memory sync log
SYNC_LOG_SIZE = int(os.getenv("SYNC_LOG_SIZE", "1000"))

# Operation names
SHUTDOWN_HOOK_CANDIDATES = _env_list("SYNC_SHUTDOWN_HOOK_CANDIDATES")
SHUTDOWN_QUERY_CANDIDATES = _env_list("SYNC_SHUTDOWN_QUERY_CANDIDATES")
SYNC_HOOKS = _env_list("SYNC_HOOKS")
