"""
FastAPI application factory.

Creates and configures the FastAPI application instance.
"""

from __future__ import annotations

from fastapi import FastAPI

from retention_service.config import get_settings
from retention_service.core.exceptions import register_exception_handlers
from retention_service.core.lifespan import lifespan
from retention_service.routers import health, info, objects, sweep


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        Configured FastAPI instance
    """
    # Load settings (validates configuration)
    settings = get_settings()

    app = FastAPI(
        title=f"{settings.service.name} Service",
        description="Serves stored shares and assets and sweeps expired ones",
        version=settings.service.version,
        lifespan=lifespan,
    )

    register_exception_handlers(app)

    app.include_router(health.router, tags=["Operations"])
    app.include_router(info.router, tags=["Operations"])
    app.include_router(objects.router, tags=["Objects"])
    app.include_router(sweep.router, tags=["Retention"])

    return app
