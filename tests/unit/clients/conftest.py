"""Fixtures for blob store client unit tests."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import AsyncMock

import httpx
import pytest

from retention_service.clients.file_store import FileBlobCollection
from retention_service.clients.http_store import HttpBlobCollection
from tests.factories import STORE_BASE_URL

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator
    from pathlib import Path


@pytest.fixture
def mock_httpx_client() -> AsyncMock:
    """Create a mock httpx.AsyncClient for testing client methods."""
    return AsyncMock(spec=httpx.AsyncClient)


@pytest.fixture
async def http_collection(
    mock_httpx_client: AsyncMock,
) -> AsyncGenerator[HttpBlobCollection, None]:
    """Create an HttpBlobCollection with a mocked httpx client."""
    collection = HttpBlobCollection(
        base_url=STORE_BASE_URL,
        store_name="deck-assets",
        timeout=5.0,
        connect_timeout=1.0,
        page_size=100,
        retry_max_attempts=2,
        retry_initial_backoff_seconds=0.0,
        retry_max_backoff_seconds=0.0,
        retry_jitter_seconds=0.0,
    )
    real_client = collection.client
    # Replace the internal httpx client with our mock
    collection.client = mock_httpx_client
    yield collection
    await real_client.aclose()


@pytest.fixture
def file_collection(tmp_path: Path) -> FileBlobCollection:
    return FileBlobCollection(root_dir=tmp_path / "blobs", store_name="shared-decks")
