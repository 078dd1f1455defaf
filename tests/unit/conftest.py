"""
Shared fixtures for unit tests.

The blob store is replaced by in-memory collections, and configuration is
written to a temporary YAML file per test.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest
import yaml

from retention_service.config import clear_settings_cache
from retention_service.models import Collection
from tests.factories import InMemoryBlobCollection, create_config_dict

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Iterator[None]:
    """Ensure settings cache is cleared before and after each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def config_dict(tmp_path: Path) -> dict[str, Any]:
    """Valid file-backend configuration rooted in the test's tmp dir."""
    return create_config_dict(str(tmp_path / "blobs"))


@pytest.fixture
def config_file(
    tmp_path: Path,
    config_dict: dict[str, Any],
    monkeypatch: pytest.MonkeyPatch,
) -> Path:
    """Write config_dict to YAML and point CONFIG_PATH at it."""
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(config_dict))
    monkeypatch.setenv("CONFIG_PATH", str(path))
    return path


@pytest.fixture
def shares() -> InMemoryBlobCollection:
    return InMemoryBlobCollection("shared-decks")


@pytest.fixture
def assets() -> InMemoryBlobCollection:
    return InMemoryBlobCollection("deck-assets")


@pytest.fixture
def collections(
    shares: InMemoryBlobCollection,
    assets: InMemoryBlobCollection,
) -> dict[Collection, InMemoryBlobCollection]:
    return {Collection.SHARES: shares, Collection.ASSETS: assets}
