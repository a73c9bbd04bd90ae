"""Folio: front-matter content ingestion and publication pipeline."""

__version__ = "0.1.0"

# Domain entities
from folio.domain.document import Document, DocumentMetadata
from folio.domain.source import SourceUnit

# Errors
from folio.errors import (
    FolioError,
    IndexIntegrityError,
    ParseError,
    ParseErrorKind,
    ValidationError,
)

# Storage
from folio.storage.corpus_index import CorpusIndex, CorpusSnapshot
from folio.storage.state_store import StateStore

# Pipeline components
from folio.config import AppConfig, load_config
from folio.pipeline.parse import parse_source
from folio.pipeline.validate import validate_metadata
from folio.pipeline.incremental import BuildCoordinator, BuildReport, BuildStatus
from folio.pipeline.pipeline import PublicationPipeline, run_build

__all__ = [
    # Domain
    "Document",
    "DocumentMetadata",
    "SourceUnit",
    # Errors
    "FolioError",
    "IndexIntegrityError",
    "ParseError",
    "ParseErrorKind",
    "ValidationError",
    # Storage
    "CorpusIndex",
    "CorpusSnapshot",
    "StateStore",
    # Pipeline
    "AppConfig",
    "load_config",
    "parse_source",
    "validate_metadata",
    "BuildCoordinator",
    "BuildReport",
    "BuildStatus",
    "PublicationPipeline",
    "run_build",
]
