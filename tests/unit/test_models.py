"""Unit tests for domain records."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from retention_service.models import BlobListing, BlobMetadata, Collection


@pytest.mark.unit
class TestCollection:
    """Tests for the Collection enum."""

    def test_values(self) -> None:
        assert Collection.SHARES == "shares"
        assert Collection.ASSETS == "assets"

    def test_label(self) -> None:
        assert Collection.SHARES.label == "Share"
        assert Collection.ASSETS.label == "Asset"


@pytest.mark.unit
class TestBlobMetadata:
    """Tests for metadata parsing."""

    def test_parses_wire_names(self) -> None:
        metadata = BlobMetadata.parse(
            {"mimeType": "image/png", "bytes": 2048, "expiresAt": 1_700_000_000_000}
        )

        assert metadata.mime_type == "image/png"
        assert metadata.size == 2048
        assert metadata.expires_at == 1_700_000_000_000

    def test_missing_fields_are_none(self) -> None:
        metadata = BlobMetadata.parse(None)

        assert metadata.mime_type is None
        assert metadata.size is None
        assert metadata.expires_at is None

    def test_unknown_fields_pass_through(self) -> None:
        raw = {"bytes": 3, "filename": "deck.json", "source": "upload"}

        assert BlobMetadata.parse(raw).to_wire() == raw

    def test_field_names_on_the_wire_are_extras(self) -> None:
        raw = {"size": 999, "expires_at": 1, "mime_type": "text/plain"}

        metadata = BlobMetadata.parse(raw)

        assert metadata.size is None
        assert metadata.expires_at is None
        assert metadata.mime_type is None
        assert metadata.to_wire() == raw

    def test_field_names_still_construct_in_code(self) -> None:
        metadata = BlobMetadata(size=5, expires_at=7)

        assert metadata.size == 5
        assert metadata.expires_at == 7

    def test_to_wire_drops_unset(self) -> None:
        assert BlobMetadata(size=10).to_wire() == {"bytes": 10}

    def test_negative_size_rejected(self) -> None:
        with pytest.raises(ValidationError):
            BlobMetadata.parse({"bytes": -1})

    def test_non_numeric_expiry_rejected(self) -> None:
        with pytest.raises(ValidationError):
            BlobMetadata.parse({"expiresAt": "tomorrow"})


@pytest.mark.unit
class TestBlobListing:
    """Tests for lazy metadata parsing on listings."""

    def test_listing_defers_parse_errors(self) -> None:
        listing = BlobListing(key="bad", raw_metadata={"expiresAt": "soon"})

        assert listing.key == "bad"
        with pytest.raises(ValidationError):
            _ = listing.metadata
