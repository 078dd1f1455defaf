"""Unit tests for health and info endpoints."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from fastapi.testclient import TestClient

    from tests.factories import InMemoryBlobCollection


@pytest.mark.unit
class TestHealthEndpoint:
    """Tests for GET /health."""

    def test_healthy(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["stores"] == {"shares": "healthy", "assets": "healthy"}
        assert "uptime_seconds" in data
        assert "uptime" in data

    def test_system_time_format(self, client: TestClient) -> None:
        data = client.get("/health").json()

        assert re.match(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}$", data["system_time"])

    def test_degraded_when_store_unreachable(
        self,
        client: TestClient,
        assets: InMemoryBlobCollection,
    ) -> None:
        assets.health = "unavailable"

        data = client.get("/health").json()

        assert data["status"] == "degraded"
        assert data["stores"]["assets"] == "unavailable"

    def test_skip_store_probe(
        self,
        client: TestClient,
        assets: InMemoryBlobCollection,
    ) -> None:
        assets.health = "unavailable"

        data = client.get("/health", params={"check_store": "false"}).json()

        assert data["status"] == "healthy"
        assert data["stores"] is None


@pytest.mark.unit
class TestInfoEndpoint:
    """Tests for GET /info."""

    def test_info(self, client: TestClient) -> None:
        response = client.get("/info")

        assert response.status_code == 200
        data = response.json()
        assert data["service"] == "retention"
        assert data["version"] == "0.1.0"
        assert data["backend"] == "file"
        assert data["collections"] == {
            "shares": {"store": "shared-decks", "status": "healthy"},
            "assets": {"store": "deck-assets", "status": "healthy"},
        }
        assert data["config"]["sweep"] == {"concurrency": 4, "timeout_seconds": 60.0}
