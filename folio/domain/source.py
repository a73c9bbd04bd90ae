"""Source unit handed to the pipeline by a corpus source provider."""

from dataclasses import dataclass

from folio.utils import sha256_bytes


@dataclass(frozen=True, slots=True)
class SourceUnit:
    """One raw content unit.

    Attributes:
        id: Document identifier derived from the source path
        raw: Undecoded bytes or already decoded text
        content_hash: SHA-256 of the raw content
        path: Source path relative to its content root
    """

    id: str
    raw: bytes | str
    content_hash: str
    path: str = ""

    @classmethod
    def from_raw(cls, id: str, raw: bytes | str, path: str = "") -> "SourceUnit":
        data = raw.encode("utf-8") if isinstance(raw, str) else raw
        return cls(id=id, raw=raw, content_hash=sha256_bytes(data), path=path or id)
