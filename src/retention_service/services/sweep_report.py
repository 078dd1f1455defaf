"""
Sweep results and the report assembled from them.

A `SweepAccumulator` is owned by the coordinator for one collection pass
and is the only mutable piece; it is frozen into a `SweepResult` when the
pass ends, and the results of both collections are merged into an
immutable `SweepReport`.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from retention_service.models import Collection

BYTES_PER_MB = 1024 * 1024


@dataclass(frozen=True)
class ItemError:
    """A failure recorded against one key (or a whole listing) during a sweep."""

    collection: Collection
    key: str
    message: str

    def describe(self) -> str:
        """Render as "Share <key>: <message>"."""
        return f"{self.collection.label} {self.key}: {self.message}"


@dataclass(frozen=True)
class SweepResult:
    """Outcome of one collection's pass."""

    collection: Collection
    scanned: int
    deleted: int
    bytes_freed: int
    skipped: int
    list_failed: bool
    errors: tuple[ItemError, ...]
    list_timed_out: bool = False

    @property
    def bytes_freed_mb(self) -> float:
        """Freed space in MB."""
        return self.bytes_freed / BYTES_PER_MB


@dataclass
class SweepAccumulator:
    """
    Mutable counters for one collection pass.

    Delete workers finish concurrently, so every update goes through the
    lock.
    """

    collection: Collection
    scanned: int = 0
    deleted: int = 0
    bytes_freed: int = 0
    skipped: int = 0
    list_failed: bool = False
    list_timed_out: bool = False
    errors: list[ItemError] = field(default_factory=list)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    async def record_deleted(self, size: int) -> None:
        async with self._lock:
            self.deleted += 1
            self.bytes_freed += size

    async def record_error(self, key: str, message: str) -> None:
        async with self._lock:
            self.errors.append(ItemError(self.collection, key, message))

    async def record_skipped(self) -> None:
        async with self._lock:
            self.skipped += 1

    async def record_list_failure(
        self,
        store_name: str,
        message: str,
        timed_out: bool = False,
    ) -> None:
        async with self._lock:
            self.list_failed = True
            self.list_timed_out = self.list_timed_out or timed_out
            self.errors.append(ItemError(self.collection, store_name, message))

    def freeze(self) -> SweepResult:
        """Snapshot the counters once the pass has finished."""
        return SweepResult(
            collection=self.collection,
            scanned=self.scanned,
            deleted=self.deleted,
            bytes_freed=self.bytes_freed,
            skipped=self.skipped,
            list_failed=self.list_failed,
            errors=tuple(self.errors),
            list_timed_out=self.list_timed_out,
        )


@dataclass(frozen=True)
class SweepReport:
    """Aggregate summary of one sweep over every collection."""

    shares: SweepResult
    assets: SweepResult
    dry_run: bool
    timed_out: bool
    started_at: datetime
    completed_at: datetime

    @property
    def results(self) -> tuple[SweepResult, SweepResult]:
        return (self.shares, self.assets)

    @property
    def bytes_freed(self) -> int:
        return self.shares.bytes_freed + self.assets.bytes_freed

    @property
    def bytes_freed_mb(self) -> str:
        """Freed space in MB, two decimal places."""
        return f"{self.bytes_freed / BYTES_PER_MB:.2f}"

    @property
    def errors(self) -> tuple[ItemError, ...]:
        return self.shares.errors + self.assets.errors

    @property
    def duration_seconds(self) -> float:
        return (self.completed_at - self.started_at).total_seconds()

    @property
    def nothing_listed(self) -> bool:
        """True when no collection could be listed, so nothing was swept."""
        return all(result.list_failed for result in self.results)

    @property
    def status_code(self) -> int:
        """
        200 for any sweep that listed at least one collection, even with
        per-item errors. 500 when every listing failed.
        """
        return 500 if self.nothing_listed else 200

    def to_dict(self) -> dict[str, Any]:
        """Convert to the camelCase JSON shape served by the cleanup endpoint."""
        return {
            "sharesScanned": self.shares.scanned,
            "sharesDeleted": self.shares.deleted,
            "assetsScanned": self.assets.scanned,
            "assetsDeleted": self.assets.deleted,
            "bytesFreed": self.bytes_freed,
            "bytesFreedMB": self.bytes_freed_mb,
            "errors": [error.describe() for error in self.errors],
            "dryRun": self.dry_run,
            "timestamp": (
                self.completed_at.isoformat(timespec="milliseconds").replace("+00:00", "Z")
            ),
            "timedOut": self.timed_out,
            "durationSeconds": round(self.duration_seconds, 3),
        }

    def summary(self) -> str:
        """One-line summary used in logs."""
        return (
            f"{self.shares.deleted}/{self.shares.scanned} shares deleted, "
            f"{self.assets.deleted}/{self.assets.scanned} assets deleted, "
            f"{self.bytes_freed_mb}MB freed" + (" (DRY RUN)" if self.dry_run else "")
        )


def format_report(report: SweepReport, max_errors: int = 5) -> str:
    """
    Generate a human-readable sweep report.

    Args:
        report: Completed sweep report
        max_errors: Errors listed per collection before truncating

    Returns:
        Multi-line report string
    """
    lines = [
        "=" * 60,
        "BLOB RETENTION SWEEP" + (" (DRY RUN)" if report.dry_run else ""),
        "=" * 60,
        f"Completed at: {report.completed_at.isoformat()}",
        f"Duration: {report.duration_seconds:.2f}s",
        f"Total space freed: {report.bytes_freed_mb} MB ({report.bytes_freed} bytes)",
        f"Total errors: {len(report.errors)}",
    ]
    if report.timed_out:
        lines.append("Deadline reached: remaining items left for the next sweep")
    if report.nothing_listed:
        lines.append("Sweep failed: no collection could be listed")
    lines.append("=" * 60)

    for result in report.results:
        lines.append(f"\n{result.collection.label}s")
        lines.append(f"  Scanned: {result.scanned}")
        lines.append(f"  Deleted: {result.deleted}")
        lines.append(f"  Space freed: {result.bytes_freed_mb:.2f} MB")
        if result.skipped:
            lines.append(f"  Skipped (deadline): {result.skipped}")
        if result.list_failed:
            lines.append("  Listing failed: collection not swept")
        if result.errors:
            lines.append(f"  Errors: {len(result.errors)}")
            for error in result.errors[:max_errors]:
                lines.append(f"    - {error.key}: {error.message}")
            if len(result.errors) > max_errors:
                lines.append(f"    ... and {len(result.errors) - max_errors} more")

    return "\n".join(lines)
