"""FastAPI backend for the continuous sync mode."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

import config
from routes import sync_router
from scheduler import get_sync_mode, shutdown_sync_mode, start_sync_mode

# Configure logging
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the sync mode on startup and run the shutdown hooks on exit."""
    mode = start_sync_mode(enable=config.SYNC_ENABLED)
    if mode.enabled:
        logger.info("Sync mode started")
    else:
        logger.info("Sync mode available but not enabled (SYNC_ENABLED=false)")

    yield

    # Trim and run the host shutdown hooks before stopping the timers
    try:
        if not get_sync_mode().host.run_shutdown():
            logger.warning("Shutdown query declined; exiting anyway")
    except Exception as e:
        logger.warning(f"Shutdown hooks failed: {e}")

    try:
        shutdown_sync_mode(wait=True)
        logger.info("Sync mode shutdown complete")
    except Exception as e:
        logger.warning(f"Sync mode shutdown error: {e}")


app = FastAPI(
    title="Continuous Sync",
    description="Idle and periodic sync passes replacing shutdown-only persistence",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(sync_router)


@app.get("/health")
async def health():
    """Health check."""
    mode = get_sync_mode()
    return {"status": "ok", "sync_enabled": mode.enabled}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8080)
