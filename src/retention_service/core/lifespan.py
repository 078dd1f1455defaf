"""
Application lifecycle management.

Builds the store clients and services on startup and closes the clients on
shutdown.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from retention_service.clients import create_collections
from retention_service.config import get_settings
from retention_service.core.state import init_app_state
from retention_service.logging import get_logger, setup_logging
from retention_service.services import RetrievalService, SweepCoordinator

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """
    Manage application lifecycle.

    Startup:
    - Initialize logging
    - Initialize application state
    - Create one store client per collection
    - Build the sweep coordinator and retrieval service
    - Probe the store (logged only)

    Shutdown:
    - Log shutdown with uptime
    - Close store clients
    """
    # === STARTUP ===
    settings = get_settings()

    setup_logging(settings.server.log_level, settings.service.name)
    logger = get_logger(__name__)

    state = init_app_state()

    logger.info(
        "Service starting",
        extra={
            "service": settings.service.name,
            "version": settings.service.version,
            "host": settings.server.host,
            "port": settings.server.port,
        },
    )

    logger.info(
        "Initializing blob store clients",
        extra={
            "backend": settings.store.backend,
            "shares_store": settings.collections.shares,
            "assets_store": settings.collections.assets,
        },
    )
    state.collections = create_collections(settings)

    state.sweeper = SweepCoordinator(
        collections=state.collections,
        concurrency=settings.sweep.concurrency,
        timeout_seconds=settings.sweep.timeout_seconds,
    )
    state.retrieval = RetrievalService(
        collections=state.collections,
        cache_control=settings.retrieval.cache_control,
        default_content_type=settings.retrieval.default_content_type,
    )

    statuses = {
        collection.value: await store.health_check()
        for collection, store in state.collections.items()
    }
    if all(status == "healthy" for status in statuses.values()):
        logger.info("Blob store health check completed", extra={"stores": statuses})
    else:
        logger.warning("Blob store not healthy at startup", extra={"stores": statuses})

    logger.info("Service ready to accept requests")

    yield  # Application runs here

    # === SHUTDOWN ===
    logger.info(
        "Service shutting down",
        extra={
            "uptime_seconds": state.uptime_seconds,
            "uptime": state.uptime_formatted,
        },
    )

    for store in state.collections.values():
        await store.close()

    logger.info("Service shutdown complete")
