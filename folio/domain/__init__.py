"""Domain entities for the folio pipeline.

This module contains immutable data structures that represent core concepts
in the content ingestion pipeline.
"""

from folio.domain.document import Document, DocumentMetadata, normalize_category
from folio.domain.source import SourceUnit

__all__ = ["Document", "DocumentMetadata", "SourceUnit", "normalize_category"]
