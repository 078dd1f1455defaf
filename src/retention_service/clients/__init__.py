"""Blob store clients, one handle per collection."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from retention_service.clients.base import BlobCollection
from retention_service.clients.file_store import FileBlobCollection
from retention_service.clients.http_store import HttpBlobCollection
from retention_service.config import ConfigurationError
from retention_service.models import Collection

if TYPE_CHECKING:
    from retention_service.config import Settings

__all__ = [
    "BlobCollection",
    "FileBlobCollection",
    "HttpBlobCollection",
    "create_collections",
]


def create_collections(settings: Settings) -> dict[Collection, BlobCollection]:
    """
    Build one client per collection for the configured backend.

    Returns:
        Mapping of collection to its store handle

    Raises:
        ConfigurationError: If the section for the selected backend is null
    """
    store_names = {
        Collection.SHARES: settings.collections.shares,
        Collection.ASSETS: settings.collections.assets,
    }

    if settings.store.backend == "file":
        file_config = settings.store.file
        if file_config is None:
            raise ConfigurationError("store.file is required when store.backend is 'file'")
        return {
            collection: FileBlobCollection(
                root_dir=Path(file_config.path),
                store_name=store_name,
            )
            for collection, store_name in store_names.items()
        }

    http = settings.store.http
    if http is None:
        raise ConfigurationError("store.http is required when store.backend is 'http'")
    return {
        collection: HttpBlobCollection(
            base_url=http.base_url,
            store_name=store_name,
            timeout=http.timeout_seconds,
            connect_timeout=http.connect_timeout_seconds,
            page_size=http.page_size,
            retry_max_attempts=http.retry.max_attempts,
            retry_initial_backoff_seconds=http.retry.initial_backoff_seconds,
            retry_max_backoff_seconds=http.retry.max_backoff_seconds,
            retry_jitter_seconds=http.retry.jitter_seconds,
        )
        for collection, store_name in store_names.items()
    }
