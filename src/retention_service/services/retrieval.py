"""
Read path: serves a single stored object with caching and validator headers.

Stored objects are content-addressed and never mutate in place, so a
successful read is marked immutable and cacheable for a year. The service
only reads from the store.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Response

from retention_service.core.exceptions import (
    BASE_HEADERS,
    BadRequestError,
    ObjectNotFoundError,
    ServiceError,
)
from retention_service.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Mapping

    from retention_service.clients import BlobCollection
    from retention_service.models import BlobMetadata, Collection

PREFLIGHT_METHODS = "GET,HEAD,OPTIONS"


class RetrievalService:
    """
    Formats store reads into HTTP responses.

    Missing ids, missing objects and store failures are raised as
    ServiceError subclasses and rendered by the app's exception handlers.
    Store failures never reach the caller verbatim: they are logged here and
    replaced by a generic "Failed to load ..." message.
    """

    def __init__(
        self,
        collections: Mapping[Collection, BlobCollection],
        cache_control: str,
        default_content_type: str,
    ) -> None:
        self.collections = dict(collections)
        self.cache_control = cache_control
        self.default_content_type = default_content_type

    def _require_key(self, collection: Collection, key: str | None) -> str:
        key = (key or "").strip()
        if not key:
            raise BadRequestError(
                f"Missing {collection.label.lower()} id",
                {"collection": collection.value},
            )
        return key

    def _not_found(self, collection: Collection, key: str) -> ObjectNotFoundError:
        return ObjectNotFoundError(
            f"{collection.label} not found",
            {"collection": collection.value, "key": key},
        )

    def _load_failed(self, collection: Collection, key: str, exc: Exception) -> ServiceError:
        logger = get_logger(__name__)
        logger.error(
            f"{collection.label} fetch failed",
            extra={"collection": collection.value, "key": key, "error_type": type(exc).__name__},
            exc_info=exc,
        )
        return ServiceError(
            error="load_failed",
            message=f"Failed to load {collection.label.lower()}",
            status_code=500,
            details={"collection": collection.value, "key": key},
        )

    def _object_headers(self, metadata: BlobMetadata, etag: str | None) -> dict[str, str]:
        headers = {
            "Content-Type": metadata.mime_type or self.default_content_type,
            "Cache-Control": self.cache_control,
            "Access-Control-Allow-Origin": "*",
        }
        if etag:
            headers["ETag"] = etag
        return headers

    async def fetch_object(self, collection: Collection, key: str | None) -> Response:
        """
        Serve an object's bytes.

        Raises:
            BadRequestError: ``key`` is missing or blank (no store call is made)
            ObjectNotFoundError: The key does not exist
            ServiceError: Any other failure, as a generic 500
        """
        key = self._require_key(collection, key)
        try:
            blob = await self.collections[collection].get(key)
        except Exception as exc:
            raise self._load_failed(collection, key, exc) from exc

        if blob is None:
            raise self._not_found(collection, key)

        headers = self._object_headers(blob.metadata, blob.etag)
        headers["Content-Length"] = str(len(blob.data))
        return Response(content=blob.data, status_code=200, headers=headers)

    async def fetch_metadata_only(self, collection: Collection, key: str | None) -> Response:
        """
        Serve an object's headers without reading its bytes.

        The body is always empty. Content-Length is the stored ``bytes``
        metadata when it is a positive number and is omitted otherwise.
        """
        key = self._require_key(collection, key)
        try:
            head = await self.collections[collection].get_metadata(key)
        except Exception as exc:
            raise self._load_failed(collection, key, exc) from exc

        if head is None:
            raise self._not_found(collection, key)

        headers = self._object_headers(head.metadata, head.etag)
        if head.metadata.size:
            headers["Content-Length"] = str(head.metadata.size)

        response = Response(content=b"", status_code=200, headers=headers)
        if not head.metadata.size:
            # Starlette fills in "0" for an empty body; an unknown size has no header.
            del response.headers["content-length"]
        return response

    def preflight(self, origin: str | None, methods: str = PREFLIGHT_METHODS) -> Response:
        """Answer a CORS preflight with permissive headers and no body."""
        headers = {
            **BASE_HEADERS,
            "Access-Control-Allow-Origin": origin or "*",
            "Access-Control-Allow-Methods": methods,
            "Access-Control-Allow-Headers": "content-type",
        }
        return Response(status_code=204, headers=headers)
