"""Front-matter document parser.

A raw source unit is split into a YAML header block and a body. The header
block is bounded by ``---`` lines at the very start of the unit; the closing
line may also be the YAML document end marker ``...``. A unit without an
opening delimiter is all body.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import PurePosixPath

import yaml

from folio.errors import Location, ParseError, ParseErrorKind

HEADER_OPEN = "---"
HEADER_CLOSE = ("---", "...")

_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"
_DATED_NAME_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})-")
_ATX_TITLE_RE = re.compile(r"^#[ \t]+(.+?)(?:[ \t]+#+)?[ \t]*$")


class FrontMatterLoader(yaml.SafeLoader):
    """Safe loader that keeps dates as plain strings.

    Calendar validation belongs to the metadata validator, so ``2015-02-30``
    must reach it as text instead of blowing up inside the YAML constructor.
    """


FrontMatterLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _TIMESTAMP_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


@dataclass(frozen=True, slots=True)
class ParsedSource:
    """Header mapping and body of one raw source unit."""

    source_id: str
    path: str
    header: dict = field(default_factory=dict)
    body: str = ""
    has_header: bool = False


def decode_source(source_id: str, raw: bytes | str) -> str:
    """Decode raw bytes as UTF-8, dropping a leading byte order mark."""
    if isinstance(raw, str):
        return raw.removeprefix("\ufeff")
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        line_start = raw.rfind(b"\n", 0, exc.start) + 1
        location = Location(
            line=raw.count(b"\n", 0, exc.start) + 1,
            column=exc.start - line_start + 1,
        )
        raise ParseError(
            source_id,
            ParseErrorKind.ENCODING_ERROR,
            location,
            f"invalid UTF-8 byte 0x{raw[exc.start]:02x}",
        ) from exc
    return text.removeprefix("\ufeff")


def parse_source(
    source_id: str,
    raw: bytes | str,
    *,
    path: str | None = None,
    derive_defaults: bool = True,
) -> ParsedSource:
    """Split one raw source unit into header mapping and body.

    Args:
        source_id: Document identifier, used in error reports
        raw: Full raw content of the unit
        path: Source path; defaults to ``source_id``
        derive_defaults: For units without a header, derive ``date`` from a
            ``YYYY-MM-DD-`` file name prefix and ``title`` from the first
            ``#`` heading

    Returns:
        ParsedSource with the decoded header and the body text

    Raises:
        ParseError: If the unit cannot be decoded or its header is malformed
    """
    path = path or source_id
    text = decode_source(source_id, raw)
    lines = text.splitlines(keepends=True)

    if not lines or lines[0].rstrip() != HEADER_OPEN:
        header = _default_header(path, text) if derive_defaults else {}
        return ParsedSource(source_id=source_id, path=path, header=header, body=text)

    close_index = None
    for index in range(1, len(lines)):
        if lines[index].rstrip() in HEADER_CLOSE:
            close_index = index
            break

    if close_index is None:
        raise ParseError(
            source_id,
            ParseErrorKind.UNTERMINATED_HEADER,
            Location(line=1),
            "header block opened but never closed",
        )

    header_text = "".join(lines[1:close_index])
    body = "".join(lines[close_index + 1:]).lstrip("\r\n")
    header = _load_header(source_id, header_text)
    return ParsedSource(
        source_id=source_id, path=path, header=header, body=body, has_header=True
    )


def _load_header(source_id: str, header_text: str) -> dict:
    try:
        data = yaml.load(header_text, Loader=FrontMatterLoader)
    except yaml.YAMLError as exc:
        mark = getattr(exc, "problem_mark", None)
        # Header content starts on line 2 of the unit.
        location = (
            Location(line=mark.line + 2, column=mark.column + 1)
            if mark is not None
            else Location(line=2)
        )
        problem = getattr(exc, "problem", None) or str(exc)
        raise ParseError(
            source_id, ParseErrorKind.MALFORMED_HEADER, location, problem
        ) from exc
    except (ValueError, TypeError, AttributeError) as exc:
        # Safe constructors raise these for explicit tags such as "!!int abc".
        raise ParseError(
            source_id,
            ParseErrorKind.MALFORMED_HEADER,
            Location(line=2),
            f"cannot construct tagged value: {exc}",
        ) from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ParseError(
            source_id,
            ParseErrorKind.MALFORMED_HEADER,
            Location(line=2),
            f"header must be a mapping, got {type(data).__name__}",
        )
    for key in data:
        if not isinstance(key, str):
            raise ParseError(
                source_id,
                ParseErrorKind.MALFORMED_HEADER,
                Location(line=2),
                f"header key {key!r} is not a string",
            )
    return data


def _default_header(path: str, body: str) -> dict:
    header = {}
    name = PurePosixPath(path).name
    dated = _DATED_NAME_RE.match(name)
    if dated:
        header["date"] = dated.group(1)
    title = _first_heading(body)
    if title:
        header["title"] = title
    return header


def _first_heading(body: str) -> str | None:
    in_fence = False
    for line in body.splitlines():
        if line.lstrip().startswith(("```", "~~~")):
            in_fence = not in_fence
            continue
        if in_fence:
            continue
        match = _ATX_TITLE_RE.match(line)
        if match:
            return match.group(1)
    return None
