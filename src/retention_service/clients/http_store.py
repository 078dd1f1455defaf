"""
HTTP client for a remote blob store.

Wire contract, per store name:

    GET    /{store}?limit=N[&cursor=C]  -> {"blobs": [{key, etag, metadata}], "cursor": str|null}
    GET    /{store}/{key}               -> payload; ETag and X-Blob-Metadata headers
    HEAD   /{store}/{key}               -> headers only
    DELETE /{store}/{key}               -> 200/204, 404 when already gone
    PUT    /{store}/{key}               -> payload + X-Blob-Metadata; ETag header back
"""

from __future__ import annotations

import asyncio
import json
import random
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import httpx

from retention_service.core.exceptions import StoreUnavailableError
from retention_service.logging import get_logger
from retention_service.models import BlobHead, BlobListing, BlobMetadata, BlobObject

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

METADATA_HEADER = "X-Blob-Metadata"

_RETRYABLE_STATUSES = frozenset({408, 429, 500, 502, 503, 504})


class HttpBlobCollection:
    """
    One collection of a remote blob store.

    Every request carries a timeout. Idempotent reads (listing pages, get,
    head) are retried on transient failures with exponential backoff and
    jitter; delete and put are attempted once so that a persistent failure
    surfaces instead of looping.
    """

    def __init__(
        self,
        base_url: str,
        store_name: str,
        timeout: float,
        connect_timeout: float,
        page_size: int,
        retry_max_attempts: int,
        retry_initial_backoff_seconds: float,
        retry_max_backoff_seconds: float,
        retry_jitter_seconds: float,
    ) -> None:
        """
        Initialize the collection client.

        Args:
            base_url: Base URL of the blob store API (e.g., "http://localhost:8004")
            store_name: Name of the store partition backing this collection
            timeout: Per-request timeout in seconds
            connect_timeout: Connection establishment timeout in seconds
            page_size: Number of entries requested per listing page
            retry_max_attempts: Total attempts for transient read failures
            retry_initial_backoff_seconds: Initial backoff for retries
            retry_max_backoff_seconds: Maximum retry backoff cap
            retry_jitter_seconds: Random jitter added to backoff
        """
        self.base_url = base_url
        self.store_name = store_name
        self.timeout = timeout
        self.page_size = page_size

        self.retry_max_attempts = retry_max_attempts
        self.retry_initial_backoff_seconds = retry_initial_backoff_seconds
        self.retry_max_backoff_seconds = retry_max_backoff_seconds
        self.retry_jitter_seconds = retry_jitter_seconds

        self.client = httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout, connect=connect_timeout),
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def health_check(self) -> str:
        """
        Probe the store with a one-entry listing request.

        Returns:
            "healthy", "unhealthy" (the store answered with an error status)
            or "unavailable" (no answer at all)
        """
        logger = get_logger(__name__)
        try:
            response = await self.client.get(
                f"/{quote(self.store_name, safe='')}", params={"limit": 1}
            )
        except httpx.HTTPError as e:
            logger.warning(
                "Blob store health probe failed",
                extra={"store": self.store_name, "error": str(e), "error_type": type(e).__name__},
            )
            return "unavailable"
        return "healthy" if response.is_success else "unhealthy"

    def _key_path(self, key: str) -> str:
        return f"/{quote(self.store_name, safe='')}/{quote(key, safe='')}"

    def _is_retryable(self, error: Exception) -> bool:
        if isinstance(error, (httpx.TimeoutException, httpx.TransportError)):
            return True
        if isinstance(error, httpx.HTTPStatusError):
            return error.response.status_code in _RETRYABLE_STATUSES
        return False

    def _compute_backoff_seconds(self, attempt: int) -> float:
        """Compute exponential backoff with jitter."""
        exponential = self.retry_initial_backoff_seconds * (2 ** (attempt - 1))
        capped_backoff = min(exponential, self.retry_max_backoff_seconds)

        jitter = 0.0
        if self.retry_jitter_seconds > 0:
            jitter = random.uniform(0.0, self.retry_jitter_seconds)  # nosec B311

        return capped_backoff + jitter

    def _unavailable(
        self,
        error: Exception,
        operation: str,
        key: str | None,
    ) -> StoreUnavailableError:
        details: dict[str, object] = {
            "store": self.store_name,
            "operation": operation,
            "error_type": type(error).__name__,
        }
        if key is not None:
            details["key"] = key

        if isinstance(error, httpx.TimeoutException):
            message = f"Blob store timed out after {self.timeout}s"
        elif isinstance(error, httpx.HTTPStatusError):
            details["store_status_code"] = error.response.status_code
            message = f"Blob store returned HTTP {error.response.status_code}"
        else:
            message = "Blob store is not responding"
        return StoreUnavailableError(message, details)

    async def _send(
        self,
        operation: str,
        key: str | None,
        request: Callable[[], Awaitable[httpx.Response]],
        *,
        retry: bool,
        allow_not_found: bool,
    ) -> httpx.Response:
        """
        Issue a request with the collection's timeout and retry policy.

        Returns:
            The response. A 404 is returned as is when ``allow_not_found``
            is set, and raised otherwise

        Raises:
            StoreUnavailableError: On connectivity failure, timeout, or a
                non-404 error status once retries are exhausted
        """
        logger = get_logger(__name__)
        max_attempts = self.retry_max_attempts if retry else 1

        for attempt in range(1, max_attempts + 1):
            try:
                response = await request()
                if allow_not_found and response.status_code == 404:
                    return response
                response.raise_for_status()
                return response

            except (httpx.TimeoutException, httpx.TransportError, httpx.HTTPStatusError) as e:
                if attempt < max_attempts and self._is_retryable(e):
                    backoff_seconds = self._compute_backoff_seconds(attempt)
                    logger.warning(
                        "Blob store request failed, retrying",
                        extra={
                            "store": self.store_name,
                            "operation": operation,
                            "key": key,
                            "attempt": attempt,
                            "max_attempts": max_attempts,
                            "backoff_seconds": round(backoff_seconds, 3),
                            "error_type": type(e).__name__,
                        },
                    )
                    await asyncio.sleep(backoff_seconds)
                    continue

                logger.warning(
                    "Blob store request failed",
                    extra={
                        "store": self.store_name,
                        "operation": operation,
                        "key": key,
                        "attempts": attempt,
                        "error_type": type(e).__name__,
                    },
                )
                raise self._unavailable(e, operation, key) from e

        raise StoreUnavailableError(
            "Blob store request failed",
            {"store": self.store_name, "operation": operation},
        )

    def _parse_metadata_header(self, response: httpx.Response, key: str) -> BlobMetadata:
        raw = response.headers.get(METADATA_HEADER)
        if not raw:
            return BlobMetadata()
        try:
            return BlobMetadata.parse(json.loads(raw))
        except (json.JSONDecodeError, TypeError, ValueError) as e:
            raise StoreUnavailableError(
                "Blob store returned malformed metadata",
                {"store": self.store_name, "key": key},
            ) from e

    async def list(self) -> list[BlobListing]:
        """
        List every entry in the collection.

        Pages are requested with ``limit`` and the store's opaque ``cursor``
        until the store stops returning one. A cursor the store has already
        handed out ends the listing with an error instead of paging again.

        Raises:
            StoreUnavailableError: If any page cannot be fetched or parsed,
                or the store repeats a cursor
        """
        path = f"/{quote(self.store_name, safe='')}"
        entries: list[BlobListing] = []
        cursor: str | None = None
        seen_cursors: set[str] = set()

        while True:
            params: dict[str, Any] = {"limit": self.page_size}
            if cursor is not None:
                params["cursor"] = cursor

            response = await self._send(
                "list",
                None,
                lambda params=params: self.client.get(path, params=params),
                retry=True,
                allow_not_found=False,
            )
            try:
                page = response.json()
                blobs = page["blobs"]
                next_cursor = page.get("cursor")
            except (json.JSONDecodeError, KeyError, TypeError) as e:
                raise StoreUnavailableError(
                    "Blob store returned an invalid listing",
                    {"store": self.store_name},
                ) from e

            for blob in blobs:
                entries.append(
                    BlobListing(
                        key=str(blob["key"]),
                        raw_metadata=dict(blob.get("metadata") or {}),
                        etag=blob.get("etag"),
                    )
                )

            if not next_cursor:
                return entries
            cursor = str(next_cursor)
            if cursor in seen_cursors:
                raise StoreUnavailableError(
                    "Blob store returned a repeating cursor",
                    {"store": self.store_name, "cursor": cursor, "entries": len(entries)},
                )
            seen_cursors.add(cursor)

    async def get_metadata(self, key: str) -> BlobHead | None:
        """Fetch metadata and etag for a key with a HEAD request."""
        path = self._key_path(key)
        response = await self._send(
            "get_metadata",
            key,
            lambda: self.client.head(path),
            retry=True,
            allow_not_found=True,
        )
        if response.status_code == 404:
            return None
        return BlobHead(
            key=key,
            metadata=self._parse_metadata_header(response, key),
            etag=response.headers.get("ETag"),
        )

    async def get(self, key: str) -> BlobObject | None:
        """Fetch payload, metadata and etag for a key."""
        path = self._key_path(key)
        response = await self._send(
            "get",
            key,
            lambda: self.client.get(path),
            retry=True,
            allow_not_found=True,
        )
        if response.status_code == 404:
            return None
        return BlobObject(
            key=key,
            data=response.content,
            metadata=self._parse_metadata_header(response, key),
            etag=response.headers.get("ETag"),
        )

    async def delete(self, key: str) -> bool:
        """Delete a key. A key that is already gone is not an error."""
        path = self._key_path(key)
        response = await self._send(
            "delete",
            key,
            lambda: self.client.delete(path),
            retry=False,
            allow_not_found=True,
        )
        return response.status_code != 404

    async def put(self, key: str, data: bytes, metadata: BlobMetadata) -> str | None:
        """Store a payload with metadata and return the etag the store assigned."""
        path = self._key_path(key)
        headers = {METADATA_HEADER: json.dumps(metadata.to_wire())}
        response = await self._send(
            "put",
            key,
            lambda: self.client.put(path, content=data, headers=headers),
            retry=False,
            allow_not_found=False,
        )
        return response.headers.get("ETag")
