"""
conftest.py
-----------
Shared pytest fixtures for llmsite tests.

Provides fixtures for:
- A writable content tree with article and daily-log folders
- Site metadata and a fixed build clock
- Entry factories
"""
import datetime as dt
import textwrap

import pytest

from llmsite.collection import ContentEntry
from llmsite.config import SiteInfo


# ----- Content Fixtures -----

@pytest.fixture
def content_dir(tmp_path):
    """Empty collection root with the two category folders."""
    root = tmp_path / "writing"
    (root / "articles").mkdir(parents=True)
    (root / "daily-logs").mkdir(parents=True)
    return root


@pytest.fixture
def write_entry(content_dir):
    """Write a markdown file with front matter under the collection root."""

    def _write(rel_path, title=None, date=None, body="Body text.\n", **extra):
        lines = ["---"]
        if title is not None:
            lines.append(f'title: "{title}"')
        if date is not None:
            lines.append(f"date: {date}")
        for key, value in extra.items():
            lines.append(f"{key}: {value}")
        lines.append("---")
        path = content_dir / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("\n".join(lines) + "\n\n" + textwrap.dedent(body), encoding="utf-8")
        return path

    return _write


# ----- Site Fixtures -----

@pytest.fixture
def site():
    return SiteInfo(
        name="meaningfool",
        url="https://example.net",
        description="Personal website.",
        scope="Everything public.",
        author="Jo Example",
        license_notice="Quotes welcome.",
    )


@pytest.fixture
def now():
    """Fixed build clock."""
    return dt.datetime(2025, 3, 4, 5, 6, 7, tzinfo=dt.timezone.utc)


@pytest.fixture
def make_entry(tmp_path):
    """Build a ContentEntry without touching the filesystem."""

    def _make(entry_id, title, date, **kwargs):
        kwargs.setdefault("source_path", tmp_path / "missing" / f"{entry_id}.md")
        kwargs.setdefault("rel_path", f"articles/{entry_id}.md")
        return ContentEntry(id=entry_id, title=title, date=date, **kwargs)

    return _make


@pytest.fixture
def scenario_entries(make_entry):
    """One article and one daily log, the log being newer."""
    return [
        make_entry("a", "Hello", dt.date(2024, 1, 1)),
        make_entry("b", "Activity Log 1", dt.date(2024, 1, 2), rel_path="daily-logs/b.md"),
    ]
