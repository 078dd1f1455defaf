"""
Fixtures for integration tests.

These tests run the real application, lifespan included, against the
file-backed blob store in a temporary directory.
"""

from __future__ import annotations

import os
import shutil
from typing import TYPE_CHECKING

import pytest
import yaml
from fastapi.testclient import TestClient

from retention_service.app import create_app
from retention_service.clients.file_store import FileBlobCollection
from retention_service.config import clear_settings_cache
from retention_service.core.state import reset_app_state
from tests.factories import create_config_dict

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


@pytest.fixture(scope="module")
def blob_root(tmp_path_factory: pytest.TempPathFactory) -> Path:
    return tmp_path_factory.mktemp("retention_integration") / "blobs"


@pytest.fixture(scope="module")
def integration_client(blob_root: Path) -> Iterator[TestClient]:
    """
    Create test client with the real application.

    Uses a temporary directory for storage to avoid polluting real data.
    """
    config_file = blob_root.parent / "config.yaml"
    config_file.write_text(yaml.safe_dump(create_config_dict(str(blob_root))))
    os.environ["CONFIG_PATH"] = str(config_file)

    clear_settings_cache()
    app = create_app()
    with TestClient(app) as test_client:
        yield test_client

    clear_settings_cache()
    reset_app_state()
    os.environ.pop("CONFIG_PATH", None)


@pytest.fixture
def client(integration_client: TestClient, blob_root: Path) -> Iterator[TestClient]:
    """Provide an empty store for each test."""
    for store_dir in blob_root.iterdir():
        shutil.rmtree(store_dir)
        store_dir.mkdir()
    yield integration_client


@pytest.fixture
def shares_store(client: TestClient, blob_root: Path) -> FileBlobCollection:
    """Direct handle on the shares directory the app reads from."""
    return FileBlobCollection(root_dir=blob_root, store_name="shared-decks")


@pytest.fixture
def assets_store(client: TestClient, blob_root: Path) -> FileBlobCollection:
    return FileBlobCollection(root_dir=blob_root, store_name="deck-assets")
