"""FastAPI dashboard application factory."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI

from coinfolio.dashboard.routes import actions, api


def create_dashboard_app(lifespan: Any = None) -> FastAPI:
    """Create and configure the FastAPI dashboard application.

    Route handlers read ``app.state.portfolio_state``, ``app.state.scheduler``
    and ``app.state.data_source``; the caller (main.py's lifespan, or a test)
    is responsible for setting them.

    Args:
        lifespan: Optional async context manager for application lifespan events.

    Returns:
        Configured FastAPI application with JSON and command routes.
    """
    app = FastAPI(
        title="Coinfolio Dashboard",
        lifespan=lifespan,
    )

    app.include_router(api.router, prefix="/api")
    app.include_router(actions.router, prefix="/actions")

    return app
