"""
Service information endpoint.
"""

from __future__ import annotations

from fastapi import APIRouter

from retention_service.config import get_safe_config, get_settings
from retention_service.core.state import get_app_state
from retention_service.schemas import CollectionInfo, InfoResponse

router = APIRouter()


@router.get("/info", response_model=InfoResponse)
async def get_info() -> InfoResponse:
    """Get service information, store layout and redacted configuration."""
    settings = get_settings()
    state = get_app_state()

    collections = {
        collection.value: CollectionInfo(
            store=store.store_name,
            status=await store.health_check(),
        )
        for collection, store in state.collections.items()
    }

    return InfoResponse(
        service=settings.service.name,
        version=settings.service.version,
        backend=settings.store.backend,
        collections=collections,
        config=get_safe_config(),
    )
