"""
Per-collection blob store contract.

The sweep and the read path only ever talk to a store through this
protocol, one instance per collection, built once at startup.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from retention_service.models import BlobHead, BlobListing, BlobMetadata, BlobObject


@runtime_checkable
class BlobCollection(Protocol):
    """
    Stateless handle over one named partition of a blob store.

    Not-found is reported as ``None`` (or ``False`` for delete), never raised.
    Connectivity and backend faults raise ``StoreUnavailableError``.
    """

    store_name: str

    async def list(self) -> list[BlobListing]:
        """Return every visible entry, following pagination transparently."""
        ...

    async def get_metadata(self, key: str) -> BlobHead | None:
        """Return metadata and etag for a key without reading its payload."""
        ...

    async def get(self, key: str) -> BlobObject | None:
        """Return payload, metadata and etag for a key."""
        ...

    async def delete(self, key: str) -> bool:
        """Delete a key. Returns True if it existed; a missing key is not an error."""
        ...

    async def put(self, key: str, data: bytes, metadata: BlobMetadata) -> str | None:
        """Store a payload with metadata. Returns the new etag when the store supplies one."""
        ...

    async def close(self) -> None:
        """Release transport resources."""
        ...

    async def health_check(self) -> str:
        """Probe the store. Returns "healthy", "unhealthy" or "unavailable"."""
        ...
