"""Folio pipeline components."""

from folio.pipeline.parse import ParsedSource, parse_source
from folio.pipeline.validate import parse_date, validate_metadata
from folio.pipeline.incremental import (
    BuildCoordinator,
    BuildFailure,
    BuildReport,
    BuildStatus,
    build_document,
)
from folio.pipeline.build_signature import compute_signature
from folio.pipeline.pipeline import PublicationPipeline, run_build

__all__ = [
    # Parsing and validation
    "ParsedSource",
    "parse_source",
    "parse_date",
    "validate_metadata",
    # Build coordination
    "BuildCoordinator",
    "BuildFailure",
    "BuildReport",
    "BuildStatus",
    "build_document",
    "compute_signature",
    # Orchestration
    "PublicationPipeline",
    "run_build",
]
