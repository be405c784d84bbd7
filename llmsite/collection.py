from __future__ import annotations

import datetime as dt
import re
from dataclasses import dataclass
from pathlib import Path

from .content import parse_front_matter, validate_front_matter
from .errors import CollectionError, DuplicateIdError, SchemaError

DEFAULT_PATTERNS = ("**/*.md", "**/*.markdown", "!**/_*", "!**/_*/**")


@dataclass(frozen=True)
class IdRule:
    """One regex substitution applied to a relative path while deriving an id."""

    name: str
    pattern: re.Pattern
    replacement: str

    @classmethod
    def compile(cls, name: str, pattern: str, replacement: str = "") -> "IdRule":
        return cls(name, re.compile(pattern), replacement)

    def apply(self, value: str) -> str:
        return self.pattern.sub(self.replacement, value, count=1)


DEFAULT_ID_RULES = (
    IdRule.compile("date-prefix", r"^(articles/)\d{4}-\d{2}-\d{2}-", r"\1"),
    IdRule.compile("folder", r"^(?:articles|daily-logs)/"),
    IdRule.compile("extension", r"\.(?:md|markdown)$"),
)


@dataclass(frozen=True)
class ContentEntry:
    id: str
    title: str
    date: dt.date
    source_path: Path
    rel_path: str
    description: str | None = None
    tags: tuple[str, ...] = ()
    draft: bool = False


@dataclass(frozen=True)
class Collection:
    name: str
    base_dir: Path
    patterns: tuple[str, ...] = DEFAULT_PATTERNS
    id_rules: tuple[IdRule, ...] = DEFAULT_ID_RULES


def _translate(pattern: str) -> str:
    out = []
    i = 0
    n = len(pattern)
    while i < n:
        char = pattern[i]
        if char == "*":
            if pattern.startswith("**", i):
                i += 2
                if i < n and pattern[i] == "/":
                    out.append("(?:.*/)?")
                    i += 1
                else:
                    out.append(".*")
                continue
            out.append("[^/]*")
        elif char == "?":
            out.append("[^/]")
        elif char == "[":
            end = pattern.find("]", i + 1)
            if end == -1:
                out.append(re.escape(char))
            else:
                body = pattern[i + 1 : end]
                if body.startswith("!"):
                    body = "^" + body[1:]
                out.append(f"[{body}]")
                i = end
        elif char == "{":
            end = pattern.find("}", i + 1)
            if end == -1:
                out.append(re.escape(char))
            else:
                options = pattern[i + 1 : end].split(",")
                out.append("(?:" + "|".join(_translate(opt) for opt in options) + ")")
                i = end
        else:
            out.append(re.escape(char))
        i += 1
    return "".join(out)


def glob_to_regex(pattern: str) -> re.Pattern:
    return re.compile(_translate(pattern) + r"\Z")


def compile_patterns(patterns: tuple[str, ...] | list[str]) -> list[tuple[bool, re.Pattern]]:
    compiled = []
    for pattern in patterns:
        pattern = pattern.strip()
        if not pattern:
            continue
        exclude = pattern.startswith("!")
        if exclude:
            pattern = pattern[1:]
        compiled.append((not exclude, glob_to_regex(pattern)))
    return compiled


def is_selected(rel_path: str, compiled: list[tuple[bool, re.Pattern]]) -> bool:
    """Later patterns win; a path no pattern matches is not selected."""
    selected = False
    for include, regex in compiled:
        if regex.match(rel_path):
            selected = include
    return selected


def is_hidden(rel_path: str) -> bool:
    return any(part.startswith(".") for part in rel_path.split("/"))


def scan_files(base_dir: Path, patterns: tuple[str, ...] | list[str]) -> list[Path]:
    compiled = compile_patterns(patterns)
    matched = []
    for path in base_dir.rglob("*"):
        if not path.is_file():
            continue
        rel = path.relative_to(base_dir).as_posix()
        if is_hidden(rel):
            continue
        if is_selected(rel, compiled):
            matched.append(path)
    return sorted(matched, key=lambda p: p.relative_to(base_dir).as_posix())


def derive_id(rel_path: str, rules: tuple[IdRule, ...] | list[IdRule] = DEFAULT_ID_RULES) -> str:
    value = rel_path
    for rule in rules:
        value = rule.apply(value)
    return value


def build_entry(path: Path, base_dir: Path, rules: tuple[IdRule, ...]) -> ContentEntry:
    rel = path.relative_to(base_dir).as_posix()
    try:
        raw_text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise CollectionError(f"Could not read {path}: {exc}") from exc
    meta, _ = parse_front_matter(raw_text, path)
    fields = validate_front_matter(meta, path)
    return ContentEntry(
        id=derive_id(rel, rules),
        source_path=path,
        rel_path=rel,
        **fields,
    )


def load_collection(collection: Collection, include_drafts: bool = False) -> list[ContentEntry]:
    """Scan, parse and validate every file of ``collection``.

    Entries come back in scan order. Schema problems are gathered across the
    whole collection and raised together; nothing is returned when any file
    is invalid. Two files deriving the same id are also fatal.
    """
    base_dir = collection.base_dir
    if not base_dir.is_dir():
        raise CollectionError(f"Content directory not found: {base_dir}")

    entries = []
    failures = []
    seen: dict[str, Path] = {}
    for path in scan_files(base_dir, collection.patterns):
        try:
            entry = build_entry(path, base_dir, collection.id_rules)
        except SchemaError as exc:
            failures.append(str(exc))
            continue
        if entry.id in seen:
            raise DuplicateIdError(entry.id, seen[entry.id], path)
        seen[entry.id] = path
        entries.append(entry)

    if failures:
        details = "\n  ".join(failures)
        raise CollectionError(
            f"Collection '{collection.name}' failed validation ({len(failures)} file(s)):\n  {details}"
        )
    if include_drafts:
        return entries
    return [entry for entry in entries if not entry.draft]
