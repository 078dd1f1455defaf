"""
Health check endpoint.

Provides service health status for container orchestration
(Docker health checks, Kubernetes probes).
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Literal

from fastapi import APIRouter, Query

from retention_service.core.state import get_app_state
from retention_service.schemas import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(
    check_store: bool = Query(
        default=True,
        description="Whether to probe the blob store",
    ),
) -> HealthResponse:
    """
    Check service health.

    - healthy: service running and every collection's store answers
    - degraded: service running but a store probe failed

    Returns:
        Health status with uptime, system time and per-collection probe results
    """
    state = get_app_state()
    system_time = datetime.now(UTC).strftime("%Y-%m-%d %H:%M")

    stores: dict[str, str] | None = None
    status: Literal["healthy", "degraded"] = "healthy"

    if check_store:
        stores = {
            collection.value: await store.health_check()
            for collection, store in state.collections.items()
        }
        if any(probe != "healthy" for probe in stores.values()):
            status = "degraded"

    return HealthResponse(
        status=status,
        uptime_seconds=state.uptime_seconds,
        uptime=state.uptime_formatted,
        system_time=system_time,
        stores=stores,
    )
