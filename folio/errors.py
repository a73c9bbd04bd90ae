"""Error taxonomy for the folio pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FolioError(Exception):
    """Base class for all folio errors."""


class ParseErrorKind(str, Enum):
    MALFORMED_HEADER = "malformed_header"
    UNTERMINATED_HEADER = "unterminated_header"
    ENCODING_ERROR = "encoding_error"


@dataclass(frozen=True)
class Location:
    """1-based line and column inside a raw source unit."""

    line: int
    column: int = 1

    def __str__(self) -> str:
        return f"line {self.line}, column {self.column}"


class ParseError(FolioError):
    """Raw source unit is structurally malformed."""

    def __init__(
        self,
        source_id: str,
        kind: ParseErrorKind,
        location: Location,
        message: str = "",
    ):
        self.source_id = source_id
        self.kind = kind
        self.location = location
        self.message = message or kind.value.replace("_", " ")
        super().__init__(f"{source_id}: {self.message} ({location})")


class ValidationError(FolioError):
    """Header is well formed but its metadata is semantically invalid."""

    def __init__(self, field: str, reason: str, source_id: str | None = None):
        self.field = field
        self.reason = reason
        self.source_id = source_id
        prefix = f"{source_id}: " if source_id else ""
        super().__init__(f"{prefix}{field}: {reason}")

    def with_source(self, source_id: str) -> "ValidationError":
        return ValidationError(self.field, self.reason, source_id=source_id)


class IndexIntegrityError(FolioError):
    """The corpus index contract was violated. Not recoverable."""


class SourceCollisionError(FolioError, ValueError):
    """Two source files map to the same document id."""


class ConfigError(FolioError, ValueError):
    """Configuration file has unknown or invalid values."""
