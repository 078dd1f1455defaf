"""
Retention policy: decides whether a stored blob may be deleted.

Shares and assets are deliberately treated differently when no expiry is
recorded:

- A share link is meaningless without a human-set expiry, so an undated
  share is a legacy entry and is eligible for cleanup.
- An asset may be reused across shares, and there is no cheap index of
  which shares reference it, so an undated asset is never swept.

Both collections become eligible strictly after their expiry
(``expires_at < now``); an entry expiring exactly at ``now`` is kept.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from retention_service.models import Collection

if TYPE_CHECKING:
    from retention_service.models import BlobMetadata


def is_expired(metadata: BlobMetadata, now_ms: int) -> bool:
    """True when an expiry is recorded and lies strictly before ``now_ms``."""
    return metadata.expires_at is not None and metadata.expires_at < now_ms


def is_eligible_for_deletion(
    collection: Collection,
    metadata: BlobMetadata,
    now_ms: int,
) -> bool:
    """
    Decide whether an entry should be removed by the sweep.

    Args:
        collection: Collection the entry belongs to
        metadata: Parsed entry metadata
        now_ms: Sweep reference time in epoch milliseconds

    Returns:
        True if the entry is expired (or, for shares, undated)
    """
    if collection == Collection.SHARES:
        return metadata.expires_at is None or metadata.expires_at < now_ms
    return is_expired(metadata, now_ms)


def expired_days_ago(metadata: BlobMetadata, now_ms: int) -> int | None:
    """Whole days since expiry, or None for an undated entry."""
    if metadata.expires_at is None:
        return None
    return round((now_ms - metadata.expires_at) / (24 * 60 * 60 * 1000))
