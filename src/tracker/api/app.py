"""FastAPI application factory for the history API."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI

from tracker.api import routes

DEFAULT_CACHE_CONTROL = "s-maxage=300, stale-while-revalidate=60"


def create_app(lifespan: Any = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        lifespan: Optional async context manager for application lifespan events.
                  Used by main.py to open and close the HTTP client and cache.

    Returns:
        Configured FastAPI application with the /api router registered.
        app.state.history_service must be set before serving requests.
    """
    app = FastAPI(
        title="Portfolio History Tracker",
        lifespan=lifespan,
    )

    app.state.history_service = None
    app.state.rate_store = None
    app.state.cache_control = DEFAULT_CACHE_CONTROL

    app.include_router(routes.router, prefix="/api")

    return app
