"""Pytest configuration for folio tests."""

import sys
from pathlib import Path

import pytest

# Add repository root to path for imports
repo_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(repo_root))

from folio.domain.source import SourceUnit  # noqa: E402


def make_post(title="Post", date="2015-02-18", categories=None, body="Body text.\n", **extra):
    """Render a front-matter post."""
    lines = ["---"]
    if title is not None:
        lines.append(f"title: {title}")
    if date is not None:
        lines.append(f'date: "{date}"')
    if categories is not None:
        lines.append(f"categories: [{', '.join(categories)}]")
    for key, value in extra.items():
        lines.append(f"{key}: {value}")
    lines.append("---")
    return "\n".join(lines) + "\n\n" + body


@pytest.fixture
def post():
    return make_post


@pytest.fixture
def source():
    def _source(source_id, text, path=None):
        return SourceUnit.from_raw(source_id, text, path=path or f"{source_id}.md")

    return _source
