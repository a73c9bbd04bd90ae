"""Corpus source providers."""

from folio.sources.filesystem import FileSystemSource, source_id_for

__all__ = ["FileSystemSource", "source_id_for"]
