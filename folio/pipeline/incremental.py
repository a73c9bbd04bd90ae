"""Incremental build coordination with checksum comparison."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from tqdm import tqdm

from folio.domain.document import Document
from folio.domain.source import SourceUnit
from folio.errors import IndexIntegrityError, ParseError, ValidationError
from folio.pipeline.parse import parse_source
from folio.pipeline.validate import validate_metadata
from folio.storage.corpus_index import CorpusIndex
from folio.storage.state_store import BuildState, SourceRecord

logger = logging.getLogger(__name__)

VALIDATION_ERROR = "validation_error"


class BuildStatus(str, Enum):
    SUCCESS = "success"
    PARTIAL = "partial"
    FATAL = "fatal"


@dataclass(frozen=True)
class BuildFailure:
    """Per-document failure with enough detail to fix the source.

    Attributes:
        source_id: Failing document id
        kind: ParseErrorKind value, or "validation_error"
        message: Human readable reason
        line: Line of the problem for parse errors
        column: Column of the problem for parse errors
        field: Offending metadata field for validation errors
        carried: True if reported from an earlier pass without re-parsing
    """

    source_id: str
    kind: str
    message: str
    line: int | None = None
    column: int | None = None
    field: str | None = None
    carried: bool = False

    @classmethod
    def from_error(cls, source_id: str, error: ParseError | ValidationError) -> "BuildFailure":
        if isinstance(error, ParseError):
            return cls(
                source_id=source_id,
                kind=error.kind.value,
                message=error.message,
                line=error.location.line,
                column=error.location.column,
            )
        return cls(
            source_id=source_id,
            kind=VALIDATION_ERROR,
            message=error.reason,
            field=error.field,
        )

    def describe(self) -> str:
        if self.field:
            where = f"field '{self.field}'"
        elif self.line is not None:
            where = f"line {self.line}, column {self.column}"
        else:
            where = "source"
        return f"{self.source_id}: {self.kind} at {where}: {self.message}"

    def to_dict(self) -> dict:
        return {
            "source_id": self.source_id,
            "kind": self.kind,
            "message": self.message,
            "line": self.line,
            "column": self.column,
            "field": self.field,
        }

    @classmethod
    def from_dict(cls, data: dict, carried: bool = False) -> "BuildFailure":
        return cls(
            source_id=data["source_id"],
            kind=data["kind"],
            message=data.get("message", ""),
            line=data.get("line"),
            column=data.get("column"),
            field=data.get("field"),
            carried=carried,
        )


@dataclass
class BuildReport:
    """Outcome of one build pass."""

    status: BuildStatus = BuildStatus.SUCCESS
    total: int = 0
    parsed: int = 0
    upserted: int = 0
    unchanged: int = 0
    skipped: int = 0
    removed: int = 0
    failures: list[BuildFailure] = field(default_factory=list)
    error: str | None = None

    @property
    def mutations(self) -> int:
        return self.upserted + self.removed

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "total": self.total,
            "parsed": self.parsed,
            "upserted": self.upserted,
            "unchanged": self.unchanged,
            "skipped": self.skipped,
            "removed": self.removed,
            "failures": [failure.to_dict() for failure in self.failures],
            "error": self.error,
        }


def build_document(source: SourceUnit, derive_defaults: bool = True) -> Document:
    """Run one source unit through the parser and validator.

    Raises:
        ParseError: If the unit is structurally malformed
        ValidationError: If its metadata is invalid
    """
    parsed = parse_source(
        source.id, source.raw, path=source.path, derive_defaults=derive_defaults
    )
    try:
        metadata = validate_metadata(parsed.header)
    except ValidationError as exc:
        raise exc.with_source(source.id) from None
    return Document.from_metadata(
        id=source.id,
        path=parsed.path,
        body=parsed.body,
        source_checksum=source.content_hash,
        metadata=metadata,
    )


class BuildCoordinator:
    """Drives parser, validator and index updates for changed sources only."""

    def __init__(
        self,
        index: CorpusIndex,
        state: BuildState | None = None,
        *,
        derive_defaults: bool = True,
        workers: int = 1,
        progress: bool = False,
    ):
        """Initialize coordinator and republish documents from ``state``.

        Args:
            index: Corpus index the coordinator writes to
            state: Build state from a previous pass
            derive_defaults: Derive title/date for units without a header
            workers: Parse/validate worker threads
            progress: Show a progress bar while applying results
        """
        self._index = index
        self._state = state or BuildState()
        self._derive_defaults = derive_defaults
        self._workers = max(1, workers)
        self._progress = progress

        for record in self._state.sources.values():
            if record.document is not None:
                self._index.upsert(record.document)

    @property
    def index(self) -> CorpusIndex:
        return self._index

    @property
    def state(self) -> BuildState:
        return self._state

    def build(self, sources: Iterable[SourceUnit], force_rebuild: bool = False) -> BuildReport:
        """Bring the index in line with ``sources``.

        Args:
            sources: Full current source set
            force_rebuild: Re-parse every source regardless of checksum

        Returns:
            BuildReport; status FATAL means the pass was aborted and the
            state must not be persisted
        """
        report = BuildReport()
        try:
            current = self._collect(sources)
            report.total = len(current)

            marked: list[SourceUnit] = []
            for source_id in sorted(current):
                source = current[source_id]
                record = self._state.sources.get(source_id)
                if force_rebuild or record is None or record.source_checksum != source.content_hash:
                    marked.append(source)
                    continue
                report.skipped += 1
                logger.debug("Skipping unchanged source %s", source_id)
                if record.failure:
                    report.failures.append(BuildFailure.from_dict(record.failure, carried=True))

            removals = sorted((self._index.ids() | self._state.sources.keys()) - current.keys())

            report.parsed = len(marked)
            outcomes = self._process(marked)
            for source, outcome in tqdm(
                zip(marked, outcomes),
                total=len(marked),
                desc="Building",
                disable=not self._progress,
            ):
                self._apply(source, outcome, report)

            for source_id in removals:
                removed = self._index.remove(source_id)
                known = self._state.sources.pop(source_id, None) is not None
                if removed or known:
                    report.removed += 1
                    logger.info("Removed %s", source_id)

        except IndexIntegrityError as exc:
            logger.error("Build aborted: %s", exc)
            report.status = BuildStatus.FATAL
            report.error = str(exc)
            return report

        report.status = BuildStatus.PARTIAL if report.failures else BuildStatus.SUCCESS
        logger.info(
            "Build %s: %d sources, %d parsed, %d upserted, %d skipped, %d removed, %d failed",
            report.status.value, report.total, report.parsed, report.upserted,
            report.skipped, report.removed, len(report.failures),
        )
        return report

    def _collect(self, sources: Iterable[SourceUnit]) -> dict[str, SourceUnit]:
        current: dict[str, SourceUnit] = {}
        for source in sources:
            if source.id in current:
                raise IndexIntegrityError(f"source id {source.id!r} supplied twice")
            current[source.id] = source
        return current

    def _process(self, marked: list[SourceUnit]) -> list[Document | ParseError | ValidationError]:
        if self._workers == 1 or len(marked) < 2:
            return [self._attempt(source) for source in marked]
        with ThreadPoolExecutor(max_workers=min(self._workers, len(marked))) as executor:
            return list(executor.map(self._attempt, marked))

    def _attempt(self, source: SourceUnit) -> Document | ParseError | ValidationError:
        try:
            return build_document(source, self._derive_defaults)
        except (ParseError, ValidationError) as exc:
            return exc

    def _apply(
        self,
        source: SourceUnit,
        outcome: Document | ParseError | ValidationError,
        report: BuildReport,
    ) -> None:
        previous = self._state.sources.get(source.id)

        if isinstance(outcome, Document):
            if self._index.upsert(outcome):
                report.upserted += 1
                logger.debug("Upserted %s", source.id)
            else:
                report.unchanged += 1
            self._state.sources[source.id] = SourceRecord(
                source_checksum=source.content_hash, document=outcome
            )
            return

        failure = BuildFailure.from_error(source.id, outcome)
        report.failures.append(failure)
        logger.warning("Failed to build %s", failure.describe())
        self._state.sources[source.id] = SourceRecord(
            source_checksum=source.content_hash,
            document=previous.document if previous else None,
            failure=failure.to_dict(),
        )
