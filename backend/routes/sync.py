"""Sync mode control routes.

This router exposes the sync mode's status, settings, and scratch log,
and lets clients enable or disable the mode, trigger a pass, and report
user activity.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field, ValidationError

from scheduler import get_sync_mode

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/sync", tags=["sync"])

MAX_LOG_LIMIT = 1000


class SettingsUpdate(BaseModel):
    """Partial update of the sync settings."""

    idle_delay: float | None = Field(default=None, ge=0)
    periodic_delay: float | None = Field(default=None, ge=0)
    faster_shutdown: bool | None = None
    shutdown_hook_candidates: list[str] | None = None
    shutdown_query_candidates: list[str] | None = None
    sync_hooks: list[str] | None = None


@router.get("/status")
async def get_sync_status() -> dict[str, Any]:
    """Get the sync mode state, armed timers, and the last pass."""
    return get_sync_mode().status()


@router.get("/settings")
async def get_sync_settings() -> dict[str, Any]:
    """Get the current sync settings."""
    return get_sync_mode().settings.model_dump()


@router.put("/settings")
def update_sync_settings(update: SettingsUpdate) -> dict[str, Any]:
    """Update sync settings.

    Delay changes take effect at the next timer tick.
    """
    changes = update.model_dump(exclude_none=True)
    if not changes:
        raise HTTPException(status_code=400, detail="No settings provided")

    try:
        settings = get_sync_mode().update_settings(**changes)
    except (ValidationError, ValueError) as e:
        raise HTTPException(status_code=422, detail=str(e)[:500])

    return settings.model_dump()


@router.post("/enable")
def enable_sync() -> dict[str, Any]:
    """Enable the sync mode and arm its timers."""
    mode = get_sync_mode()
    try:
        mode.enable()
    except RuntimeError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {"enabled": mode.enabled, **mode.coordinator.describe()}


@router.post("/disable")
def disable_sync() -> dict[str, Any]:
    """Disable the sync mode and cancel its timers."""
    mode = get_sync_mode()
    mode.disable()
    return {"enabled": mode.enabled}


@router.post("/run")
def run_sync_now() -> dict[str, Any]:
    """Run a sync pass immediately."""
    try:
        result = get_sync_mode().run_pass()
    except Exception as e:
        logger.error(f"Sync pass could not start: {e}", exc_info=True)
        raise HTTPException(
            status_code=500, detail=f"Sync pass could not start: {str(e)[:200]}"
        )

    if result is None:
        raise HTTPException(status_code=409, detail="Sync pass already running")
    return result.to_dict()


@router.get("/log")
async def get_sync_log(
    limit: int = Query(default=100, ge=1, le=MAX_LOG_LIMIT),
    pass_id: str | None = None,
) -> dict[str, Any]:
    """Get recent scratch log entries, oldest first."""
    entries = get_sync_mode().sync_log.entries(pass_id=pass_id, limit=limit)
    return {
        "entries": [entry.to_dict() for entry in entries],
        "lines": [entry.format() for entry in entries],
        "total": len(entries),
    }


@router.post("/activity")
def record_activity() -> dict[str, Any]:
    """Report user activity, ending the current idle stretch."""
    mode = get_sync_mode()
    mode.record_activity()
    return {"idle_seconds": mode.backend.idle_seconds()}
