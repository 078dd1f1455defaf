"""
Pydantic request/response models for the retention service API.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class HealthResponse(BaseModel):
    """Response model for GET /health endpoint."""

    status: Literal["healthy", "degraded"]
    """Service health status; degraded while a store cannot be reached."""

    uptime_seconds: float
    """Uptime in seconds since service start."""

    uptime: str
    """Human-readable uptime."""

    system_time: str
    """Current system time in yyyy-mm-dd hh:mm format (UTC)."""

    stores: dict[str, str] | None = None
    """Probe result per collection (if check_store=true)."""


class CollectionInfo(BaseModel):
    """Store backing one collection, for /info."""

    model_config = ConfigDict(extra="forbid")

    store: str
    status: str


class InfoResponse(BaseModel):
    """Response model for GET /info endpoint."""

    service: str
    version: str
    backend: Literal["http", "file"]
    collections: dict[str, CollectionInfo]
    config: dict[str, Any]
    """Effective configuration with sensitive values redacted."""


class DeleteAssetsRequest(BaseModel):
    """Request body for POST /assets/delete."""

    ids: list[Any] = Field(default_factory=list)
    """Asset keys. Stringified and trimmed; blank entries are dropped."""

    @field_validator("ids", mode="before")
    @classmethod
    def _coerce_ids(cls, value: Any) -> list[Any]:
        if value is None:
            return []
        if not isinstance(value, list):
            raise ValueError("ids must be a list")
        return value

    def normalized_ids(self) -> list[str]:
        """Return trimmed, non-blank ids in request order."""
        ids = (str(raw).strip() for raw in self.ids if raw is not None)
        return [asset_id for asset_id in ids if asset_id]


class DeleteAssetsResponse(BaseModel):
    """Response model for POST /assets/delete."""

    model_config = ConfigDict(extra="forbid")

    deleted: int
    """Number of ids whose delete call succeeded."""


class SweepReportResponse(BaseModel):
    """Response model for GET|POST /cleanup."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    shares_scanned: int = Field(alias="sharesScanned")
    shares_deleted: int = Field(alias="sharesDeleted")
    assets_scanned: int = Field(alias="assetsScanned")
    assets_deleted: int = Field(alias="assetsDeleted")
    bytes_freed: int = Field(alias="bytesFreed")
    bytes_freed_mb: str = Field(alias="bytesFreedMB")
    errors: list[str]
    dry_run: bool = Field(alias="dryRun")
    timestamp: str
    timed_out: bool = Field(alias="timedOut")
    duration_seconds: float = Field(alias="durationSeconds")
