from __future__ import annotations

import hashlib
import re
from types import MappingProxyType
from typing import Any, Mapping


_slug_re = re.compile(r"[^a-z0-9\s-]")
_space_re = re.compile(r"\s+")


def slugify(text: str) -> str:
    normalized = text.strip().lower()
    normalized = _slug_re.sub("", normalized)
    normalized = _space_re.sub("-", normalized)
    normalized = normalized.strip("-")
    return normalized or "untitled"


def sha256_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def sha256_text(text: str) -> str:
    return sha256_bytes(text.encode("utf-8"))


def freeze(value: Any) -> Any:
    """Return a read-only copy of a decoded YAML/JSON value.

    Mappings become ``MappingProxyType`` views over private copies, lists
    become tuples and sets become frozensets.
    """
    if isinstance(value, Mapping):
        return MappingProxyType({key: freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(item) for item in value)
    if isinstance(value, (set, frozenset)):
        return frozenset(freeze(item) for item in value)
    return value


def thaw(value: Any) -> Any:
    """Inverse of ``freeze``: plain dicts and lists, safe to serialize."""
    if isinstance(value, Mapping):
        return {key: thaw(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [thaw(item) for item in value]
    return value
