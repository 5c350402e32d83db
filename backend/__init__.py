"""Continuous Sync Backend Package.

Runs a configurable set of persistence operations whenever the user goes
idle, with a periodic check as a fallback, instead of relying only on
hooks that run at shutdown. Operations already covered are trimmed from
the shutdown hooks so exit stays fast.

Usage:
    # Development (from project root):
    PYTHONPATH=backend uvicorn app:app --reload --port 8080

Modules:
    app: FastAPI application entry point
    config: Environment-driven defaults
    operations: Operation model, host hook lists, resolver, shutdown trimmer
    scheduler: Timers, coordinator, sync executor, and the sync mode
    routes: HTTP control surface for the sync mode
"""

__version__ = "0.1.0"
