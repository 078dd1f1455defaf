"""
File-backed blob collection.

Stores each object as {key}.dat with a {key}.meta.json sidecar holding its
metadata and etag, under one directory per collection. Used for local
development and integration tests in place of a remote store.
"""

from __future__ import annotations

import hashlib
import json
from typing import TYPE_CHECKING, Any
from urllib.parse import quote, unquote

from retention_service.core.exceptions import StoreUnavailableError
from retention_service.models import BlobHead, BlobListing, BlobMetadata, BlobObject

if TYPE_CHECKING:
    from pathlib import Path

_META_SUFFIX = ".meta.json"


class FileBlobCollection:
    """
    File-backed blob collection.

    Keys are percent-encoded into file names, so any opaque key is safe.
    Filesystem errors surface as StoreUnavailableError.
    """

    def __init__(self, root_dir: Path, store_name: str) -> None:
        self.store_name = store_name
        self.root = root_dir / store_name
        self.root.mkdir(parents=True, exist_ok=True)

    def _data_path(self, key: str) -> Path:
        return self.root / f"{quote(key, safe='')}.dat"

    def _meta_path(self, key: str) -> Path:
        return self.root / f"{quote(key, safe='')}{_META_SUFFIX}"

    def _read_sidecar(self, key: str) -> dict[str, Any] | None:
        path = self._meta_path(key)
        if not path.exists():
            return None
        return json.loads(path.read_text(encoding="utf-8"))

    def _failed(self, exc: Exception, operation: str, key: str | None) -> StoreUnavailableError:
        details: dict[str, object] = {
            "store": self.store_name,
            "operation": operation,
            "error_type": type(exc).__name__,
        }
        if key is not None:
            details["key"] = key
        return StoreUnavailableError(f"Blob store {operation} failed", details)

    async def list(self) -> list[BlobListing]:
        """List every entry in the collection, sorted by key."""
        try:
            entries = []
            for meta_path in sorted(self.root.glob(f"*{_META_SUFFIX}")):
                key = unquote(meta_path.name.removesuffix(_META_SUFFIX))
                sidecar = json.loads(meta_path.read_text(encoding="utf-8"))
                entries.append(
                    BlobListing(
                        key=key,
                        raw_metadata=dict(sidecar.get("metadata") or {}),
                        etag=sidecar.get("etag"),
                    )
                )
            return entries
        except (OSError, json.JSONDecodeError) as exc:
            raise self._failed(exc, "list", None) from exc

    async def get_metadata(self, key: str) -> BlobHead | None:
        """Read the sidecar for a key. Returns None if not found."""
        try:
            sidecar = self._read_sidecar(key)
        except (OSError, json.JSONDecodeError) as exc:
            raise self._failed(exc, "get_metadata", key) from exc
        if sidecar is None:
            return None
        return BlobHead(
            key=key,
            metadata=BlobMetadata.parse(sidecar.get("metadata")),
            etag=sidecar.get("etag"),
        )

    async def get(self, key: str) -> BlobObject | None:
        """Read payload and sidecar for a key. Returns None if not found."""
        try:
            sidecar = self._read_sidecar(key)
            data_path = self._data_path(key)
            if sidecar is None or not data_path.exists():
                return None
            data = data_path.read_bytes()
        except (OSError, json.JSONDecodeError) as exc:
            raise self._failed(exc, "get", key) from exc
        return BlobObject(
            key=key,
            data=data,
            metadata=BlobMetadata.parse(sidecar.get("metadata")),
            etag=sidecar.get("etag"),
        )

    async def delete(self, key: str) -> bool:
        """Delete a single object. Returns True if it existed."""
        existed = False
        try:
            for path in (self._data_path(key), self._meta_path(key)):
                if path.exists():
                    path.unlink()
                    existed = True
        except OSError as exc:
            raise self._failed(exc, "delete", key) from exc
        return existed

    async def put(self, key: str, data: bytes, metadata: BlobMetadata) -> str:
        """Store an object and return its etag (a quoted SHA-256 of the payload)."""
        etag = f'"{hashlib.sha256(data).hexdigest()}"'
        sidecar = {"metadata": metadata.to_wire(), "etag": etag}
        try:
            self._data_path(key).write_bytes(data)
            self._meta_path(key).write_text(json.dumps(sidecar), encoding="utf-8")
        except OSError as exc:
            raise self._failed(exc, "put", key) from exc
        return etag

    async def close(self) -> None:
        """Nothing to release for the filesystem backend."""

    def count(self) -> int:
        """Return the number of stored objects."""
        return sum(1 for _ in self.root.glob(f"*{_META_SUFFIX}"))

    async def health_check(self) -> str:
        """The store is healthy while its directory exists."""
        return "healthy" if self.root.is_dir() else "unavailable"
