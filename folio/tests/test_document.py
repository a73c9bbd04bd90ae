"""Tests for domain entities (Document and SourceUnit)."""

from datetime import date
import hashlib

import pytest

from folio.domain.document import Document, DocumentMetadata, normalize_category
from folio.domain.source import SourceUnit


class TestDocument:
    """Test Document entity creation and serialization."""

    def test_create_document_with_required_fields(self):
        """Test creating a document with minimal required fields."""
        doc = Document(
            id="posts/hello",
            path="posts/hello.md",
            title="Hello",
            published_at=date(2015, 2, 18),
            source_checksum="abc123",
        )

        assert doc.id == "posts/hello"
        assert doc.categories == ()
        assert doc.body == ""
        assert doc.extra == {}

    def test_from_metadata_copies_fields(self):
        """Test building a document from validated metadata."""
        metadata = DocumentMetadata(
            title="Hello",
            published_at=date(2015, 2, 18),
            categories=("Go", "Performance"),
            extra={"author": "someone"},
        )

        doc = Document.from_metadata(
            id="hello",
            path="hello.md",
            body="Body",
            source_checksum="abc",
            metadata=metadata,
        )

        assert doc.title == "Hello"
        assert doc.categories == ("Go", "Performance")
        assert doc.extra == {"author": "someone"}
        assert doc.extra is not metadata.extra

    def test_category_keys_are_normalized(self):
        """Test that category keys are case-folded and trimmed."""
        doc = Document(
            id="a",
            path="a.md",
            title="A",
            published_at=date(2015, 1, 1),
            source_checksum="x",
            categories=("Go", " Python "),
        )

        assert doc.category_keys == frozenset({"go", "python"})

    def test_to_dict_and_from_dict(self):
        """Test converting a document to the persisted format and back."""
        doc = Document(
            id="a",
            path="a.md",
            title="A",
            published_at=date(2014, 12, 26),
            source_checksum="x",
            categories=("go",),
            body="text",
            extra={"tags": ["t"]},
        )

        data = doc.to_dict()

        assert data["published_at"] == "2014-12-26"
        assert data["categories"] == ["go"]
        assert Document.from_dict(data) == doc

    def test_document_immutability(self):
        """Test that Document is frozen (immutable)."""
        doc = Document(
            id="a",
            path="a.md",
            title="A",
            published_at=date(2015, 1, 1),
            source_checksum="x",
        )

        with pytest.raises(Exception):  # FrozenInstanceError
            doc.title = "New Title"

    def test_extra_is_read_only(self):
        """Test that unknown header keys cannot be changed after construction."""
        raw = {"tags": ["a", "b"], "author": {"name": "me"}}
        doc = Document(
            id="a",
            path="a.md",
            title="A",
            published_at=date(2015, 1, 1),
            source_checksum="x",
            extra=raw,
        )
        raw["tags"].append("c")
        raw["draft"] = True

        assert doc.extra == {"tags": ("a", "b"), "author": {"name": "me"}}
        with pytest.raises(TypeError):
            doc.extra["draft"] = True
        with pytest.raises(TypeError):
            doc.extra["author"]["name"] = "someone else"
        with pytest.raises(AttributeError):
            doc.extra["tags"].append("c")

    def test_to_dict_thaws_extra(self):
        doc = Document(
            id="a",
            path="a.md",
            title="A",
            published_at=date(2015, 1, 1),
            source_checksum="x",
            extra={"tags": ["t"], "author": {"name": "me"}},
        )

        data = doc.to_dict()

        assert data["extra"] == {"tags": ["t"], "author": {"name": "me"}}
        assert type(data["extra"]) is dict
        data["extra"]["tags"].append("u")
        assert doc.extra["tags"] == ("t",)


def test_normalize_category():
    assert normalize_category("  Go ") == "go"
    assert normalize_category("STRASSE") == normalize_category("straße")


class TestSourceUnit:
    """Test SourceUnit construction."""

    def test_from_raw_hashes_text_as_utf8(self):
        unit = SourceUnit.from_raw("a", "héllo")

        assert unit.content_hash == hashlib.sha256("héllo".encode("utf-8")).hexdigest()
        assert unit.path == "a"

    def test_from_raw_hashes_bytes(self):
        unit = SourceUnit.from_raw("a", b"\xff\xfe", path="a.md")

        assert unit.content_hash == hashlib.sha256(b"\xff\xfe").hexdigest()
        assert unit.path == "a.md"
