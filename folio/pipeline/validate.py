"""Metadata validation for parsed header blocks."""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, Mapping

from folio.domain.document import DocumentMetadata, normalize_category
from folio.errors import ValidationError

KNOWN_KEYS = ("title", "date", "categories")

_MONTHS = {
    "january": 1, "february": 2, "march": 3, "april": 4, "may": 5, "june": 6,
    "july": 7, "august": 8, "september": 9, "october": 10, "november": 11,
    "december": 12,
}
_MONTHS.update({name[:3]: number for name, number in list(_MONTHS.items())})
_MONTHS["sept"] = 9

_ISO_RE = re.compile(
    r"^(?P<year>\d{4})(?P<sep>[-/.])(?P<month>\d{1,2})(?P=sep)(?P<day>\d{1,2})"
    r"(?:[T ]+(?P<hour>\d{1,2}):(?P<minute>\d{2})(?::(?P<second>\d{2})(?:\.\d+)?)?"
    r"\s*(?:Z|[+-]\d{2}:?\d{2})?)?$"
)
_NUMERIC_RE = re.compile(r"^(\d{1,2})([-/.])(\d{1,2})\2(\d{4})$")
_MONTH_FIRST_RE = re.compile(
    r"^(?P<month>[A-Za-z]+)\.?\s+(?P<day>\d{1,2})(?:st|nd|rd|th)?,?\s+(?P<year>\d{4})$"
)
_DAY_FIRST_RE = re.compile(
    r"^(?P<day>\d{1,2})(?:st|nd|rd|th)?\s+(?P<month>[A-Za-z]+)\.?,?\s+(?P<year>\d{4})$"
)


def validate_metadata(header: Mapping[str, Any]) -> DocumentMetadata:
    """Validate a parsed header mapping.

    Args:
        header: Key-value mapping decoded from the header block

    Returns:
        DocumentMetadata with trimmed title, parsed date, deduplicated
        categories and the unknown keys carried over verbatim

    Raises:
        ValidationError: On the first field that breaks a rule
    """
    extra = {key: value for key, value in header.items() if key not in KNOWN_KEYS}
    return DocumentMetadata(
        title=_validate_title(header.get("title")),
        published_at=parse_date(header.get("date")),
        categories=_validate_categories(header.get("categories")),
        extra=extra,
    )


def _validate_title(value: Any) -> str:
    if value is None:
        raise ValidationError("title", "is required")
    # YAML turns titles such as "1984" into numbers.
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str):
        raise ValidationError("title", f"must be a string, got {type(value).__name__}")
    title = value.strip()
    if not title:
        raise ValidationError("title", "must not be empty")
    return title


def parse_date(value: Any) -> date:
    """Parse a front-matter date value into a calendar date.

    Ambiguous day/month orderings such as ``03/04/2015`` are rejected
    instead of guessed.

    Raises:
        ValidationError: If the value is missing, malformed, not a real
            calendar date, or ambiguous
    """
    if value is None:
        raise ValidationError("date", "is required")
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValidationError("date", f"must be a date string, got {type(value).__name__}")

    text = value.strip()
    if not text:
        raise ValidationError("date", "must not be empty")

    match = _ISO_RE.match(text)
    if match:
        _check_time(text, match)
        return _make_date(text, match["year"], match["month"], match["day"])

    match = _NUMERIC_RE.match(text)
    if match:
        return _resolve_numeric(text, match.group(1), match.group(3), match.group(4))

    match = _MONTH_FIRST_RE.match(text) or _DAY_FIRST_RE.match(text)
    if match:
        month = _MONTHS.get(match["month"].lower())
        if month is None:
            raise ValidationError("date", f"unknown month name in {text!r}")
        return _make_date(text, match["year"], month, match["day"])

    raise ValidationError("date", f"unrecognized date format {text!r}")


def _make_date(text: str, year, month, day) -> date:
    try:
        return date(int(year), int(month), int(day))
    except ValueError:
        raise ValidationError("date", f"{text!r} is not a valid calendar date") from None


def _check_time(text: str, match: re.Match) -> None:
    if match["hour"] is None:
        return
    hour, minute = int(match["hour"]), int(match["minute"])
    second = int(match["second"] or 0)
    if hour > 23 or minute > 59 or second > 59:
        raise ValidationError("date", f"{text!r} has an invalid time of day")


def _resolve_numeric(text: str, first: str, second: str, year: str) -> date:
    candidates = set()
    for day, month in ((first, second), (second, first)):
        try:
            candidates.add(date(int(year), int(month), int(day)))
        except ValueError:
            continue
    if not candidates:
        raise ValidationError("date", f"{text!r} is not a valid calendar date")
    if len(candidates) > 1:
        raise ValidationError(
            "date", f"{text!r} is ambiguous (day/month order); use YYYY-MM-DD"
        )
    return candidates.pop()


def _validate_categories(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        entries = value.split(",")
    elif isinstance(value, (list, tuple)):
        entries = list(value)
    else:
        raise ValidationError(
            "categories", f"must be a list of strings, got {type(value).__name__}"
        )

    labels: list[str] = []
    seen: set[str] = set()
    for position, entry in enumerate(entries):
        if isinstance(entry, (int, float)) and not isinstance(entry, bool):
            entry = str(entry)
        if not isinstance(entry, str):
            raise ValidationError(
                "categories",
                f"entry {position} must be a string, got {type(entry).__name__}",
            )
        label = entry.strip()
        if not label:
            raise ValidationError("categories", f"entry {position} is empty")
        key = normalize_category(label)
        if key in seen:
            continue
        seen.add(key)
        labels.append(label)
    return tuple(labels)
