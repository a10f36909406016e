"""FastAPI application factory for the converter API."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI

from converter.api import routes
from converter.pricing.engine import ConversionEngine


def create_app(engine: ConversionEngine | None = None, lifespan: Any = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        engine: Conversion engine served by the routes. May be attached to
                ``app.state.engine`` later by the lifespan instead.
        lifespan: Optional async context manager for startup/shutdown.
                  Used by main.py to start and stop the poller.

    Returns:
        Configured FastAPI application with the JSON API under ``/api``.
    """
    app = FastAPI(title="QI/QUAI Converter", lifespan=lifespan)
    app.state.engine = engine
    app.include_router(routes.router, prefix="/api")
    return app
