"""API routers for the retention service."""

from retention_service.routers import health, info, objects, sweep

__all__ = ["health", "info", "objects", "sweep"]
