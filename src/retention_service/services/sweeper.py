"""
Sweep coordinator: garbage-collects expired shares and assets.

One sweep lists both collections concurrently, evaluates the retention
policy for every entry against a single `now` captured at the start, and
deletes the eligible entries through a bounded worker fan-out. Failures are
recorded per item and never abort the sweep; a collection whose listing
fails is reported and the other collection still runs.
"""

from __future__ import annotations

import asyncio
import time
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from pydantic import ValidationError

from retention_service.core.exceptions import StoreUnavailableError
from retention_service.logging import get_logger
from retention_service.models import Collection
from retention_service.services.retention_policy import expired_days_ago, is_eligible_for_deletion
from retention_service.services.sweep_report import SweepAccumulator, SweepReport

if TYPE_CHECKING:
    from collections.abc import Mapping

    from retention_service.clients import BlobCollection
    from retention_service.models import BlobListing

SWEEP_ORDER: tuple[Collection, ...] = (Collection.SHARES, Collection.ASSETS)


class SweepCoordinator:
    """
    Runs retention sweeps over the shares and assets collections.

    Holds no per-sweep state: every call to `run_sweep` builds its own
    accumulators, so the coordinator can be shared for the process lifetime.
    """

    def __init__(
        self,
        collections: Mapping[Collection, BlobCollection],
        concurrency: int,
        timeout_seconds: float | None,
    ) -> None:
        """
        Initialize the coordinator.

        Args:
            collections: Store handle for every collection in SWEEP_ORDER
            concurrency: Maximum deletes in flight per collection
            timeout_seconds: Default sweep deadline; None disables it
        """
        missing = [c for c in SWEEP_ORDER if c not in collections]
        if missing:
            raise ValueError(f"Missing store handles for: {', '.join(missing)}")
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")

        self.collections = dict(collections)
        self.concurrency = concurrency
        self.timeout_seconds = timeout_seconds

    async def run_sweep(
        self,
        simulate: bool,
        now_ms: int | None = None,
        timeout_seconds: float | None = None,
    ) -> SweepReport:
        """
        Sweep every collection once.

        Args:
            simulate: Report what would be deleted without calling delete
            now_ms: Reference time in epoch milliseconds (defaults to the
                wall clock when the sweep starts)
            timeout_seconds: Deadline override for this sweep

        Returns:
            Report with per-collection counts and every recorded error.
            Never raises.
        """
        logger = get_logger(__name__)
        started_at = datetime.now(UTC)
        if now_ms is None:
            now_ms = int(started_at.timestamp() * 1000)

        timeout = self.timeout_seconds if timeout_seconds is None else timeout_seconds
        deadline = time.monotonic() + timeout if timeout is not None else None

        logger.info(
            "Sweep starting",
            extra={"dry_run": simulate, "now_ms": now_ms, "timeout_seconds": timeout},
        )

        accumulators = {collection: SweepAccumulator(collection) for collection in SWEEP_ORDER}
        outcomes = await asyncio.gather(
            *(
                self._sweep_collection(accumulators[collection], simulate, now_ms, deadline)
                for collection in SWEEP_ORDER
            ),
            return_exceptions=True,
        )
        for collection, outcome in zip(SWEEP_ORDER, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                logger.error(
                    "Collection pass aborted",
                    extra={"collection": collection.value, "error_type": type(outcome).__name__},
                    exc_info=outcome,
                )
                await accumulators[collection].record_list_failure(
                    self.collections[collection].store_name,
                    "Sweep aborted unexpectedly",
                )

        shares = accumulators[Collection.SHARES].freeze()
        assets = accumulators[Collection.ASSETS].freeze()
        report = SweepReport(
            shares=shares,
            assets=assets,
            dry_run=simulate,
            timed_out=any(
                result.skipped or result.list_timed_out for result in (shares, assets)
            ),
            started_at=started_at,
            completed_at=datetime.now(UTC),
        )

        logger.info(
            f"Cleanup complete: {report.summary()}",
            extra={
                "shares_scanned": shares.scanned,
                "shares_deleted": shares.deleted,
                "assets_scanned": assets.scanned,
                "assets_deleted": assets.deleted,
                "bytes_freed": report.bytes_freed,
                "errors": len(report.errors),
                "timed_out": report.timed_out,
                "duration_seconds": round(report.duration_seconds, 3),
            },
        )
        return report

    async def _sweep_collection(
        self,
        acc: SweepAccumulator,
        simulate: bool,
        now_ms: int,
        deadline: float | None,
    ) -> None:
        """List one collection and process its entries with bounded fan-out."""
        logger = get_logger(__name__)
        store = self.collections[acc.collection]

        try:
            entries = await self._list_entries(store, deadline)
        except TimeoutError:
            logger.error(
                "Listing did not finish before the sweep deadline",
                extra={"collection": acc.collection.value, "store": store.store_name},
            )
            await acc.record_list_failure(
                store.store_name,
                "Listing did not finish before the sweep deadline",
                timed_out=True,
            )
            return
        except StoreUnavailableError as e:
            logger.error(
                "Failed to list collection",
                extra={
                    "collection": acc.collection.value,
                    "store": store.store_name,
                    "error_message": e.message,
                    "details": e.details,
                },
            )
            await acc.record_list_failure(store.store_name, e.message)
            return

        acc.scanned = len(entries)
        semaphore = asyncio.Semaphore(self.concurrency)

        async def worker(entry: BlobListing) -> None:
            async with semaphore:
                await self._process_entry(store, acc, entry, simulate, now_ms, deadline)

        await asyncio.gather(*(worker(entry) for entry in entries))

    async def _list_entries(
        self,
        store: BlobCollection,
        deadline: float | None,
    ) -> list[BlobListing]:
        """
        List a collection, bounded by whatever time the sweep has left.

        A deadline that has already passed does not stop the listing, so the
        eligible entries can still be counted as skipped.
        """
        remaining = None if deadline is None else deadline - time.monotonic()
        if remaining is None or remaining <= 0:
            return await store.list()
        async with asyncio.timeout(remaining):
            return await store.list()

    async def _process_entry(
        self,
        store: BlobCollection,
        acc: SweepAccumulator,
        entry: BlobListing,
        simulate: bool,
        now_ms: int,
        deadline: float | None,
    ) -> None:
        """Evaluate one entry and delete it if eligible. Records, never raises."""
        logger = get_logger(__name__)
        collection = acc.collection

        try:
            metadata = entry.metadata
            if not is_eligible_for_deletion(collection, metadata, now_ms):
                return

            if deadline is not None and time.monotonic() >= deadline:
                await acc.record_skipped()
                return

            age_days = expired_days_ago(metadata, now_ms)
            logger.info(
                f"Deleting expired {collection.label.lower()}: {entry.key}",
                extra={
                    "collection": collection.value,
                    "key": entry.key,
                    "expired": f"{age_days} days ago" if age_days is not None else "no expiry set",
                    "bytes": metadata.size,
                    "dry_run": simulate,
                },
            )

            if not simulate:
                await store.delete(entry.key)

            await acc.record_deleted(metadata.size or 0)

        except StoreUnavailableError as e:
            logger.error(
                f"Error processing {collection.label.lower()} {entry.key}",
                extra={"collection": collection.value, "key": entry.key, "details": e.details},
            )
            await acc.record_error(entry.key, e.message)
        except ValidationError as e:
            logger.error(
                f"Invalid metadata on {collection.label.lower()} {entry.key}",
                extra={"collection": collection.value, "key": entry.key},
            )
            await acc.record_error(entry.key, f"Invalid metadata ({e.error_count()} errors)")
        except Exception as e:
            logger.exception(
                f"Error processing {collection.label.lower()} {entry.key}",
                extra={"collection": collection.value, "key": entry.key},
            )
            await acc.record_error(entry.key, str(e) or type(e).__name__)
