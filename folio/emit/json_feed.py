"""JSON feed emitter."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from pydantic import BaseModel

from folio.emit.base import BaseEmitter
from folio.emit.schemas import CategoryFeed, DocumentRecord, TimelineEntry, TimelineFeed
from folio.storage.corpus_index import CorpusSnapshot
from folio.utils import slugify

logger = logging.getLogger(__name__)


class JsonFeedEmitter(BaseEmitter):
    """Writes the corpus as static JSON files.

    Layout under ``output_dir``::

        timeline.json
        categories/<slug>.json
        documents/<id>.json

    The ``categories`` and ``documents`` directories are rewritten on every
    emit so removed documents and emptied categories disappear.
    """

    def __init__(self, output_dir: str | Path, indent: int | None = 2):
        self._output_dir = Path(output_dir)
        self._indent = indent

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    def emit(self, snapshot: CorpusSnapshot) -> None:
        self._output_dir.mkdir(parents=True, exist_ok=True)
        entries = {
            doc_id: TimelineEntry.from_document(snapshot.documents[doc_id])
            for doc_id in snapshot.timeline
        }

        self._write(
            self._output_dir / "timeline.json",
            TimelineFeed(count=len(entries), entries=list(entries.values())),
        )

        categories_dir = self._reset_dir("categories")
        for key, slug in self.category_slugs(snapshot).items():
            ids = snapshot.categories[key]
            self._write(
                categories_dir / f"{slug}.json",
                CategoryFeed(
                    label=snapshot.labels[key],
                    key=key,
                    slug=slug,
                    count=len(ids),
                    entries=[entries[doc_id] for doc_id in ids],
                ),
            )

        documents_dir = self._reset_dir("documents")
        for document in snapshot.iter_timeline():
            target = documents_dir / f"{document.id}.json"
            target.parent.mkdir(parents=True, exist_ok=True)
            self._write(target, DocumentRecord.from_document(document))

        logger.info(
            "Emitted %d documents and %d categories to %s",
            len(snapshot), len(snapshot.categories), self._output_dir,
        )

    @staticmethod
    def category_slugs(snapshot: CorpusSnapshot) -> dict[str, str]:
        """Normalized label -> unique file name stem."""
        slugs: dict[str, str] = {}
        taken: set[str] = set()
        for key in snapshot.categories:
            base = slugify(key)
            slug = base
            counter = 2
            while slug in taken:
                slug = f"{base}-{counter}"
                counter += 1
            taken.add(slug)
            slugs[key] = slug
        return slugs

    def _reset_dir(self, name: str) -> Path:
        path = self._output_dir / name
        if path.exists():
            shutil.rmtree(path)
        path.mkdir(parents=True)
        return path

    def _write(self, path: Path, model: BaseModel) -> None:
        path.write_text(model.model_dump_json(indent=self._indent) + "\n", encoding="utf-8")
