from __future__ import annotations

import datetime as dt
import re
from pathlib import Path

import yaml

from .errors import FrontMatterError, SchemaError
from .utils import as_utc, parse_bool

FENCE_RE = re.compile(r"^(?P<indent>[ \t]*)(`{3,}|~{3,})")
HEADING_RE = re.compile(r"^(?P<hashes>#{1,6})(?=[ \t]|\r?\n|$)")
DELIMITER = "---"


def _split_front_matter(text: str) -> tuple[list[str], list[str]] | None:
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].strip() != DELIMITER:
        return None
    for i in range(1, len(lines)):
        if lines[i].strip() == DELIMITER:
            return lines[1:i], lines[i + 1 :]
    return None


def parse_front_matter(text: str, path: Path | None = None) -> tuple[dict, str]:
    clean_text = text.lstrip("\ufeff")
    parts = _split_front_matter(clean_text)
    if parts is None:
        return {}, clean_text
    meta_lines, body_lines = parts
    try:
        meta = yaml.safe_load("".join(meta_lines))
    except yaml.YAMLError as exc:
        raise FrontMatterError(path or Path("<string>"), str(exc)) from exc
    if meta is None:
        meta = {}
    if not isinstance(meta, dict):
        raise FrontMatterError(path or Path("<string>"), "expected a mapping")
    return meta, "".join(body_lines)


def strip_front_matter(text: str) -> str:
    """Drop the leading ``---`` block and the blank lines after it.

    Text that does not open with a front-matter block is returned as is.
    """
    parts = _split_front_matter(text.lstrip("\ufeff"))
    if parts is None:
        return text
    return "".join(parts[1]).lstrip("\r\n")


def demote_headings(text: str, levels: int = 2, max_level: int = 4) -> str:
    lines = text.splitlines(keepends=True)
    out: list[str] = []
    in_fence = False
    fence_marker = ""
    for line in lines:
        fence_match = FENCE_RE.match(line)
        if fence_match:
            marker = fence_match.group(2)
            if not in_fence:
                in_fence = True
                fence_marker = marker
            elif marker.startswith(fence_marker[0]) and len(marker) >= len(fence_marker):
                in_fence = False
                fence_marker = ""
            out.append(line)
            continue
        if not in_fence:
            heading = HEADING_RE.match(line)
            if heading and len(heading.group("hashes")) <= max_level:
                line = "#" * levels + line
        out.append(line)
    return "".join(out)


def coerce_date(value: object) -> dt.date | None:
    if isinstance(value, dt.datetime):
        if value.tzinfo is not None:
            return as_utc(value).date()
        return value.date()
    if isinstance(value, dt.date):
        return value
    if isinstance(value, str):
        text = value.strip().strip("'\"")
        try:
            return dt.date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return coerce_date(dt.datetime.fromisoformat(text))
        except ValueError:
            return None
    return None


def validate_front_matter(meta: dict, path: Path) -> dict:
    """Check ``meta`` against the entry schema and return normalized fields.

    Required: ``title`` (non-empty string) and ``date``. Optional:
    ``description`` (string), ``tags`` (list of strings) and ``draft``.
    All problems are reported together in a single :class:`SchemaError`.
    """
    problems = []

    title = meta.get("title")
    if title is None:
        problems.append("missing required field 'title'")
    elif not isinstance(title, str) or not title.strip():
        problems.append("'title' must be a non-empty string")

    raw_date = meta.get("date")
    date_value = None
    if raw_date is None:
        problems.append("missing required field 'date'")
    else:
        date_value = coerce_date(raw_date)
        if date_value is None:
            problems.append(f"'date' is not a valid date: {raw_date!r}")

    description = meta.get("description")
    if description is not None and not isinstance(description, str):
        problems.append("'description' must be a string")

    tags = meta.get("tags")
    if tags is None:
        tags = []
    elif not isinstance(tags, list) or not all(isinstance(tag, str) for tag in tags):
        problems.append("'tags' must be a list of strings")

    if problems:
        raise SchemaError(path, problems)

    return {
        "title": title.strip(),
        "date": date_value,
        "description": description,
        "tags": tuple(tags),
        "draft": parse_bool(meta.get("draft")),
    }
