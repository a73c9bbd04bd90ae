"""Complete publication pipeline orchestrator."""

from __future__ import annotations

import logging
from pathlib import Path

from folio.config import AppConfig, resolve_path
from folio.emit.base import BaseEmitter
from folio.emit.json_feed import JsonFeedEmitter
from folio.pipeline.build_signature import compute_signature
from folio.pipeline.incremental import BuildCoordinator, BuildReport, BuildStatus
from folio.sources.filesystem import FileSystemSource
from folio.storage.corpus_index import CorpusIndex
from folio.storage.state_store import StateStore

logger = logging.getLogger(__name__)


class PublicationPipeline:
    """Sources -> build coordinator -> persisted state -> emitter."""

    def __init__(self, config: AppConfig | None = None, base_dir: Path | None = None):
        """Initialize pipeline.

        Args:
            config: Pipeline configuration (defaults if omitted)
            base_dir: Directory relative config paths resolve against
        """
        self._config = config or AppConfig()
        self._base_dir = base_dir or Path.cwd()
        self._signature = compute_signature(self._config)
        self._store = StateStore(resolve_path(self._config.build.state_path, self._base_dir))

    @property
    def config(self) -> AppConfig:
        return self._config

    @property
    def state_store(self) -> StateStore:
        return self._store

    def source(self) -> FileSystemSource:
        roots = [resolve_path(root, self._base_dir) for root in self._config.content.roots]
        return FileSystemSource(roots, self._config.content.file_extensions)

    def default_emitter(self) -> JsonFeedEmitter:
        return JsonFeedEmitter(
            resolve_path(self._config.output.dir, self._base_dir),
            indent=self._config.output.indent,
        )

    def coordinator(self, index: CorpusIndex | None = None) -> BuildCoordinator:
        """Coordinator over a fresh (or given) index, restored from persisted state."""
        return BuildCoordinator(
            index if index is not None else CorpusIndex(),
            self._store.load(self._signature),
            derive_defaults=self._config.parsing.derive_defaults,
            workers=self._config.build.workers,
            progress=self._config.build.progress,
        )

    def load_index(self) -> CorpusIndex:
        """Index as published by the last successful pass, without building."""
        return self.coordinator().index

    def build(
        self,
        force_rebuild: bool = False,
        emit: bool = True,
        emitter: BaseEmitter | None = None,
    ) -> BuildReport:
        """Run one build pass.

        Args:
            force_rebuild: Re-parse every source
            emit: Hand the finished snapshot to the emitter
            emitter: Emitter to use instead of the configured JSON emitter

        Returns:
            BuildReport. State is persisted and output emitted only when the
            status is not FATAL.
        """
        sources = self.source().collect()
        coordinator = self.coordinator()
        coordinator.state.signature = self._signature

        report = coordinator.build(sources, force_rebuild=force_rebuild)
        if report.status is BuildStatus.FATAL:
            logger.error("Build state not saved: %s", report.error)
            return report

        self._store.save(coordinator.state)

        if emit:
            (emitter or self.default_emitter()).emit(coordinator.index.snapshot())

        return report


def run_build(
    config: AppConfig | None = None,
    base_dir: Path | None = None,
    force_rebuild: bool = False,
    emit: bool = True,
    emitter: BaseEmitter | None = None,
) -> BuildReport:
    """Run a complete build pass from content roots to emitted output.

    Args:
        config: Pipeline configuration
        base_dir: Directory relative config paths resolve against
        force_rebuild: Re-parse every source
        emit: Emit output after a non-fatal pass
        emitter: Custom emitter

    Returns:
        BuildReport for the pass
    """
    pipeline = PublicationPipeline(config=config, base_dir=base_dir)
    return pipeline.build(force_rebuild=force_rebuild, emit=emit, emitter=emitter)
