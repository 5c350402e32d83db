"""API route modules for the continuous sync backend.

This package contains focused routers that are registered with the main FastAPI app.

Routers:
- sync: Sync mode status, settings, manual passes, and activity reports
"""

from .sync import router as sync_router

__all__ = ["sync_router"]
