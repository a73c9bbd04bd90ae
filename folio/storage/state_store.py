"""Persisted build state for incremental builds."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from folio.domain.document import Document

logger = logging.getLogger(__name__)

STATE_SCHEMA_VERSION = 1


@dataclass
class SourceRecord:
    """What the last pass knew about one source id.

    Attributes:
        source_checksum: Checksum of the source as last attempted
        document: Last successfully built document, if any
        failure: Failure record from the last attempt, if it failed
    """

    source_checksum: str
    document: Document | None = None
    failure: dict | None = None

    def to_dict(self) -> dict:
        return {
            "source_checksum": self.source_checksum,
            "document": self.document.to_dict() if self.document else None,
            "failure": self.failure,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SourceRecord":
        document = data.get("document")
        return cls(
            source_checksum=data["source_checksum"],
            document=Document.from_dict(document) if document else None,
            failure=data.get("failure"),
        )


@dataclass
class BuildState:
    """Mapping from source id to its last known record."""

    signature: str = ""
    sources: dict[str, SourceRecord] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "schema_version": STATE_SCHEMA_VERSION,
            "signature": self.signature,
            "sources": {
                source_id: record.to_dict()
                for source_id, record in sorted(self.sources.items())
            },
        }

    @classmethod
    def from_dict(cls, data: dict) -> "BuildState":
        return cls(
            signature=data.get("signature", ""),
            sources={
                source_id: SourceRecord.from_dict(record)
                for source_id, record in data.get("sources", {}).items()
            },
        )


def write_json_atomic(path: Path, payload: object) -> Path:
    """Atomically persist ``payload`` as JSON to ``path``."""
    resolved = path.expanduser()
    resolved.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        "w",
        encoding="utf-8",
        dir=str(resolved.parent),
        prefix=f".{resolved.name}.",
        suffix=".tmp",
        delete=False,
    ) as handle:
        temp_path = Path(handle.name)
        try:
            json.dump(payload, handle, indent=2, sort_keys=True, ensure_ascii=False, default=str)
            handle.flush()
            os.fsync(handle.fileno())
        except BaseException:
            handle.close()
            temp_path.unlink(missing_ok=True)
            raise
    os.replace(temp_path, resolved)
    return resolved


class StateStore:
    """JSON file store for ``BuildState``.

    The file is replaced atomically on save, so a crash mid-write leaves the
    previous state intact.
    """

    def __init__(self, path: str | Path):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self, signature: str | None = None) -> BuildState:
        """Load the stored state.

        Args:
            signature: Expected build signature. A stored state written under
                a different signature or schema is discarded.

        Returns:
            The stored state, or an empty one. An unreadable or corrupt file
            also yields an empty state, which forces a full rebuild.
        """
        if not self._path.exists():
            return BuildState(signature=signature or "")

        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise TypeError(f"expected a JSON object, got {type(data).__name__}")
            state = self._decode(data, signature)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("Discarding corrupt build state %s: %s", self._path, e)
            return BuildState(signature=signature or "")
        return state

    def _decode(self, data: dict, signature: str | None) -> BuildState:
        if data.get("schema_version") != STATE_SCHEMA_VERSION:
            logger.info(
                "Discarding build state %s: schema %s != %s",
                self._path, data.get("schema_version"), STATE_SCHEMA_VERSION,
            )
            return BuildState(signature=signature or "")
        if signature is not None and data.get("signature") != signature:
            logger.info("Build settings changed, discarding state %s", self._path)
            return BuildState(signature=signature)

        return BuildState.from_dict(data)

    def save(self, state: BuildState) -> Path:
        written = write_json_atomic(self._path, state.to_dict())
        logger.debug("Saved build state for %d sources to %s", len(state.sources), written)
        return written

    def clear(self) -> None:
        self._path.unlink(missing_ok=True)
