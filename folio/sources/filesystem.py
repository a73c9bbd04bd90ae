"""Corpus source provider backed by content directories."""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from typing import Iterable, Iterator, Sequence

from folio.domain.source import SourceUnit
from folio.errors import SourceCollisionError

logger = logging.getLogger(__name__)


def source_id_for(relative_path: str) -> str:
    """Derive a document id from a path relative to its content root."""
    return str(PurePosixPath(relative_path).with_suffix(""))


class FileSystemSource:
    """Reads every matching file under a set of content roots.

    Hidden files and directories (leading ``.``) are skipped. Ids are the
    root-relative POSIX path without its suffix, so ``posts/hello.md``
    becomes ``posts/hello``.
    """

    def __init__(self, roots: Sequence[str | Path], file_extensions: Iterable[str]):
        self._roots = [Path(root) for root in roots]
        self._extensions = {extension.lower() for extension in file_extensions}

    def iter_paths(self) -> Iterator[tuple[Path, str]]:
        for root in self._roots:
            if not root.is_dir():
                logger.warning("Content root %s does not exist, skipping", root)
                continue
            for path in sorted(root.rglob("*")):
                relative = path.relative_to(root)
                if any(part.startswith(".") for part in relative.parts):
                    continue
                if path.is_file() and path.suffix.lower() in self._extensions:
                    yield path, relative.as_posix()

    def collect(self) -> list[SourceUnit]:
        """Read all sources.

        Raises:
            SourceCollisionError: If two files map to the same id
        """
        seen: dict[str, Path] = {}
        units: list[SourceUnit] = []
        for path, relative in self.iter_paths():
            source_id = source_id_for(relative)
            if source_id in seen:
                raise SourceCollisionError(
                    f"{path} and {seen[source_id]} both map to document id {source_id!r}"
                )
            seen[source_id] = path
            units.append(SourceUnit.from_raw(source_id, path.read_bytes(), path=relative))
        logger.info("Collected %d sources from %d roots", len(units), len(self._roots))
        return units

    def __iter__(self) -> Iterator[SourceUnit]:
        return iter(self.collect())
