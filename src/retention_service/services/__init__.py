"""Retention sweep and read-path services."""

from retention_service.services.retention_policy import is_eligible_for_deletion, is_expired
from retention_service.services.retrieval import RetrievalService
from retention_service.services.sweep_report import (
    ItemError,
    SweepReport,
    SweepResult,
    format_report,
)
from retention_service.services.sweeper import SweepCoordinator

__all__ = [
    "ItemError",
    "RetrievalService",
    "SweepCoordinator",
    "SweepReport",
    "SweepResult",
    "format_report",
    "is_eligible_for_deletion",
    "is_expired",
]
