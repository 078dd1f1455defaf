"""
Application state management.

Tracks runtime state like uptime, and holds the store handles and the
services built from them at startup.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from retention_service.clients import BlobCollection
    from retention_service.models import Collection
    from retention_service.services import RetrievalService, SweepCoordinator


@dataclass
class AppState:
    """
    Runtime application state.

    Attributes:
        start_time: When the application started (UTC)
        collections: Store handle per collection, owned by the lifespan
        _sweeper: Sweep coordinator (internal)
        _retrieval: Read path service (internal)
    """

    start_time: datetime = field(default_factory=lambda: datetime.now(UTC))
    collections: dict[Collection, BlobCollection] = field(default_factory=dict, repr=False)
    _sweeper: SweepCoordinator | None = field(default=None, repr=False)
    _retrieval: RetrievalService | None = field(default=None, repr=False)

    @property
    def sweeper(self) -> SweepCoordinator:
        """Get the sweep coordinator. Raises RuntimeError if not initialized."""
        if self._sweeper is None:
            raise RuntimeError("Sweep coordinator not initialized")
        return self._sweeper

    @sweeper.setter
    def sweeper(self, value: SweepCoordinator) -> None:
        self._sweeper = value

    @property
    def retrieval(self) -> RetrievalService:
        """Get the retrieval service. Raises RuntimeError if not initialized."""
        if self._retrieval is None:
            raise RuntimeError("Retrieval service not initialized")
        return self._retrieval

    @retrieval.setter
    def retrieval(self, value: RetrievalService) -> None:
        self._retrieval = value

    @property
    def uptime_seconds(self) -> float:
        """Calculate uptime in seconds."""
        return (datetime.now(UTC) - self.start_time).total_seconds()

    @property
    def uptime_formatted(self) -> str:
        """
        Format uptime as human-readable string.

        Returns:
            String like "2d 3h 15m 42s" or "15m 42s"
        """
        seconds = int(self.uptime_seconds)
        days, remainder = divmod(seconds, 86400)
        hours, remainder = divmod(remainder, 3600)
        minutes, secs = divmod(remainder, 60)

        parts = []
        if days > 0:
            parts.append(f"{days}d")
        if hours > 0:
            parts.append(f"{hours}h")
        if minutes > 0:
            parts.append(f"{minutes}m")
        parts.append(f"{secs}s")

        return " ".join(parts)


# Initialized in lifespan context
_app_state: AppState | None = None


def get_app_state() -> AppState:
    """
    Get the current application state.

    Raises:
        RuntimeError: If called before app startup
    """
    if _app_state is None:
        raise RuntimeError("Application state not initialized")
    return _app_state


def init_app_state() -> AppState:
    """Initialize application state. Called during startup."""
    global _app_state  # noqa: PLW0603
    _app_state = AppState()
    return _app_state


def reset_app_state() -> None:
    """Reset application state. Used in testing."""
    global _app_state  # noqa: PLW0603
    _app_state = None
