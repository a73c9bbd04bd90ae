"""In-memory corpus index with timeline and category orderings."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import date
from types import MappingProxyType
from typing import Iterator, Mapping

from folio.domain.document import Document, normalize_category
from folio.errors import IndexIntegrityError
from folio.storage.ordering import SortedKeySet


def _sort_key(document: Document) -> tuple[int, str]:
    # Newest first, then id ascending.
    return (-document.published_at.toordinal(), document.id)


@dataclass(frozen=True)
class CorpusSnapshot:
    """Read-only view of the whole index taken at a single instant.

    Attributes:
        documents: id -> Document
        timeline: ids newest first, ties by id
        categories: normalized label -> ids, same ordering as timeline
        labels: normalized label -> display label (first one seen)
    """

    documents: Mapping[str, Document]
    timeline: tuple[str, ...]
    categories: Mapping[str, tuple[str, ...]]
    labels: Mapping[str, str]

    def by_category(self, label: str) -> tuple[str, ...]:
        return self.categories.get(normalize_category(label), ())

    def iter_timeline(self) -> Iterator[Document]:
        for doc_id in self.timeline:
            yield self.documents[doc_id]

    def __len__(self) -> int:
        return len(self.timeline)


class CorpusIndex:
    """Authoritative id -> Document mapping plus its derived orderings.

    All mutations are serialized by an internal lock. Views returned by
    ``timeline``, ``by_category`` and ``snapshot`` are immutable and are
    never touched by later mutations.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._documents: dict[str, Document] = {}
        self._timeline = SortedKeySet()
        self._categories: dict[str, SortedKeySet] = {}
        self._labels: dict[str, str] = {}
        self._snapshot: CorpusSnapshot | None = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._documents)

    def __contains__(self, doc_id: object) -> bool:
        with self._lock:
            return doc_id in self._documents

    def get(self, doc_id: str) -> Document | None:
        with self._lock:
            return self._documents.get(doc_id)

    def ids(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._documents)

    def upsert(self, document: Document) -> bool:
        """Insert or replace a document by id.

        Args:
            document: Fully validated document

        Returns:
            True if the stored document changed, False if an equal one was
            already present

        Raises:
            IndexIntegrityError: If the document breaks its own invariants or
                would change the source path of an existing id
        """
        self._check_document(document)
        with self._lock:
            previous = self._documents.get(document.id)
            if previous is not None:
                if previous.path != document.path:
                    raise IndexIntegrityError(
                        f"document {document.id!r} is already bound to "
                        f"{previous.path!r}, refusing {document.path!r}"
                    )
                if previous == document:
                    return False

            new_key = _sort_key(document)
            new_categories = self._category_labels(document)

            if previous is not None:
                old_key = _sort_key(previous)
                old_categories = previous.category_keys
                if old_key != new_key:
                    self._discard(self._timeline, old_key)
                    self._timeline.add(new_key)
                for category in old_categories - new_categories.keys():
                    self._discard(self._categories[category], old_key)
                    if not self._categories[category]:
                        del self._categories[category]
                        del self._labels[category]
                for category in old_categories & new_categories.keys():
                    if old_key != new_key:
                        self._discard(self._categories[category], old_key)
                        self._categories[category].add(new_key)
                added = new_categories.keys() - old_categories
            else:
                self._timeline.add(new_key)
                added = new_categories.keys()

            for category in added:
                if category not in self._categories:
                    self._categories[category] = SortedKeySet()
                self._categories[category].add(new_key)
                self._labels.setdefault(category, new_categories[category])

            self._documents[document.id] = document
            self._snapshot = None
            return True

    def remove(self, doc_id: str) -> bool:
        """Remove a document from every index. Absent ids are ignored."""
        with self._lock:
            document = self._documents.pop(doc_id, None)
            if document is None:
                return False
            key = _sort_key(document)
            self._discard(self._timeline, key)
            for category in document.category_keys:
                entries = self._categories[category]
                self._discard(entries, key)
                if not entries:
                    del self._categories[category]
                    del self._labels[category]
            self._snapshot = None
            return True

    def clear(self) -> None:
        with self._lock:
            self._documents.clear()
            self._timeline.clear()
            self._categories.clear()
            self._labels.clear()
            self._snapshot = None

    def timeline(self) -> tuple[str, ...]:
        """All ids, newest first, ties broken by ascending id."""
        return self.snapshot().timeline

    def by_category(self, label: str) -> tuple[str, ...]:
        """Ids in a category (case-insensitive label), timeline ordered."""
        return self.snapshot().by_category(label)

    def categories(self) -> Mapping[str, str]:
        """Normalized label -> display label for every non-empty category."""
        return self.snapshot().labels

    def snapshot(self) -> CorpusSnapshot:
        with self._lock:
            if self._snapshot is None:
                self._snapshot = CorpusSnapshot(
                    documents=MappingProxyType(dict(self._documents)),
                    timeline=tuple(doc_id for _, doc_id in self._timeline),
                    categories=MappingProxyType({
                        category: tuple(doc_id for _, doc_id in entries)
                        for category, entries in sorted(self._categories.items())
                    }),
                    labels=MappingProxyType(dict(sorted(self._labels.items()))),
                )
            return self._snapshot

    @staticmethod
    def _category_labels(document: Document) -> dict[str, str]:
        labels: dict[str, str] = {}
        for label in document.categories:
            labels.setdefault(normalize_category(label), label)
        return labels

    @staticmethod
    def _discard(entries: SortedKeySet, key: tuple[int, str]) -> None:
        try:
            entries.remove(key)
        except KeyError:
            raise IndexIntegrityError(
                f"index entry {key[1]!r} is missing from an ordering"
            ) from None

    @staticmethod
    def _check_document(document: Document) -> None:
        if not isinstance(document, Document):
            raise IndexIntegrityError(f"expected Document, got {type(document).__name__}")
        if not document.id:
            raise IndexIntegrityError("document id must not be empty")
        if not document.title or not document.title.strip():
            raise IndexIntegrityError(f"document {document.id!r} has an empty title")
        if not isinstance(document.published_at, date):
            raise IndexIntegrityError(
                f"document {document.id!r} has no valid publication date"
            )
        for label in document.categories:
            if not isinstance(label, str) or not label.strip():
                raise IndexIntegrityError(
                    f"document {document.id!r} has an empty category label"
                )
