"""
Domain records for stored blobs.

The store hands back an open metadata mapping; everything this service
reads from it is pinned down in `BlobMetadata`, so each presence/absence
branch the retention policy depends on is explicit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Collection(StrEnum):
    """Named partitions of the blob store, each with its own key namespace."""

    SHARES = "shares"
    ASSETS = "assets"

    @property
    def label(self) -> str:
        """Singular, capitalised name used in messages ("Share", "Asset")."""
        return self.value[:-1].capitalize()


class BlobMetadata(BaseModel):
    """
    Application metadata attached to a stored blob.

    Only the fields this service interprets are typed. Anything else the
    upstream writers attach (filename, createdAt, source) is kept as an
    extra and passed through untouched.
    """

    model_config = ConfigDict(
        extra="allow",
        frozen=True,
        validate_by_alias=True,
        validate_by_name=True,
    )

    mime_type: str | None = Field(default=None, alias="mimeType")
    """MIME type of the payload."""

    size: int | None = Field(default=None, alias="bytes", ge=0)
    """Payload size in bytes."""

    expires_at: int | None = Field(default=None, alias="expiresAt")
    """Absolute expiry as epoch milliseconds. None means undated."""

    @classmethod
    def parse(cls, raw: dict[str, Any] | None) -> BlobMetadata:
        """
        Validate a raw metadata mapping from the store.

        Only the wire names are recognised. A stored key that happens to match
        a Python field name (`size`, `expires_at`) is kept as an extra.
        """
        return cls.model_validate(raw or {}, by_alias=True, by_name=False)

    def to_wire(self) -> dict[str, Any]:
        """Serialize back to the store's camelCase mapping, dropping unset fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


@dataclass(frozen=True)
class BlobListing:
    """
    One entry as returned by a collection listing.

    Metadata is kept raw so that a malformed entry only fails when it is
    evaluated, not when the whole page is read.
    """

    key: str
    raw_metadata: dict[str, Any] = field(default_factory=dict)
    etag: str | None = None

    @property
    def metadata(self) -> BlobMetadata:
        """Parsed metadata. Raises pydantic.ValidationError when malformed."""
        return BlobMetadata.parse(self.raw_metadata)


@dataclass(frozen=True)
class BlobHead:
    """Metadata and validator for a key, without its payload."""

    key: str
    metadata: BlobMetadata
    etag: str | None


@dataclass(frozen=True)
class BlobObject:
    """A stored blob with its payload."""

    key: str
    data: bytes
    metadata: BlobMetadata
    etag: str | None
