"""Fixtures for router tests: the real app over in-memory collections."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from retention_service.core.state import AppState
from retention_service.services import RetrievalService, SweepCoordinator

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from retention_service.models import Collection
    from tests.factories import InMemoryBlobCollection


@pytest.fixture
def app_state(collections: dict[Collection, InMemoryBlobCollection]) -> AppState:
    """Application state wired the way the lifespan wires it."""
    state = AppState()
    state.collections = dict(collections)
    state.sweeper = SweepCoordinator(collections, concurrency=4, timeout_seconds=None)
    state.retrieval = RetrievalService(
        collections,
        cache_control="public, max-age=31536000, immutable",
        default_content_type="application/octet-stream",
    )
    return state


@pytest.fixture
def client(config_file: Path, app_state: AppState) -> Iterator[TestClient]:
    """Test client without lifespan; routers see app_state."""
    with (
        patch("retention_service.routers.health.get_app_state", return_value=app_state),
        patch("retention_service.routers.info.get_app_state", return_value=app_state),
        patch("retention_service.routers.objects.get_app_state", return_value=app_state),
        patch("retention_service.routers.sweep.get_app_state", return_value=app_state),
    ):
        from retention_service.app import create_app  # noqa: PLC0415

        yield TestClient(create_app(), raise_server_exceptions=False)
