"""Document entity for the folio pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Mapping

from folio.utils import freeze, thaw


def normalize_category(label: str) -> str:
    """Return the indexing key for a category label."""
    return label.strip().casefold()


@dataclass(frozen=True, slots=True)
class DocumentMetadata:
    """Validated header metadata for one source unit.

    Attributes:
        title: Trimmed, non-empty title
        published_at: Publication date
        categories: Display labels in first-occurrence order, deduplicated
        extra: Unknown header keys, kept verbatim
    """

    title: str
    published_at: date
    categories: tuple[str, ...] = ()
    extra: dict = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Document:
    """Immutable document entity.

    Represents a single published unit of the corpus. A Document is replaced
    as a whole whenever its source checksum changes.

    Attributes:
        id: Stable identifier derived from the source path (e.g., "posts/2015-02-18-go-strings")
        path: Source path the id was derived from (e.g., "posts/2015-02-18-go-strings.md")
        title: Document title
        published_at: Publication date, drives chronological ordering
        categories: Category display labels (may be empty)
        body: Raw body text following the header block
        source_checksum: SHA-256 hash of the raw source for change detection
        extra: Unknown header keys, frozen into a read-only mapping
    """

    id: str
    path: str
    title: str
    published_at: date
    source_checksum: str
    categories: tuple[str, ...] = ()
    body: str = ""
    extra: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "extra", freeze(self.extra))

    @property
    def category_keys(self) -> frozenset[str]:
        """Normalized category labels used for indexing."""
        return frozenset(normalize_category(label) for label in self.categories)

    @classmethod
    def from_metadata(
        cls,
        *,
        id: str,
        path: str,
        body: str,
        source_checksum: str,
        metadata: DocumentMetadata,
    ) -> "Document":
        return cls(
            id=id,
            path=path,
            title=metadata.title,
            published_at=metadata.published_at,
            source_checksum=source_checksum,
            categories=metadata.categories,
            body=body,
            extra=metadata.extra,
        )

    def to_dict(self) -> dict:
        """Convert document to a JSON-serializable dictionary."""
        return {
            "id": self.id,
            "path": self.path,
            "title": self.title,
            "published_at": self.published_at.isoformat(),
            "source_checksum": self.source_checksum,
            "categories": list(self.categories),
            "body": self.body,
            "extra": thaw(self.extra),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Document":
        """Create document from dictionary (persisted state format).

        Args:
            data: Dictionary with document fields

        Returns:
            Document instance
        """
        return cls(
            id=data["id"],
            path=data.get("path", data["id"]),
            title=data["title"],
            published_at=date.fromisoformat(data["published_at"]),
            source_checksum=data["source_checksum"],
            categories=tuple(data.get("categories", ())),
            body=data.get("body", ""),
            extra=data.get("extra") or {},
        )
