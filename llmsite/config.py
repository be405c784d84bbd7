from __future__ import annotations

import json
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path

import yaml

from .collection import DEFAULT_ID_RULES, DEFAULT_PATTERNS, Collection, IdRule

DEFAULT_PAGES = (("About", "/about"), ("Home", "/"), ("RSS Feed", "/rss.xml"))


@dataclass(frozen=True)
class SiteInfo:
    name: str
    url: str
    description: str
    scope: str = ""
    author: str = ""
    license_notice: str = ""
    language: str = "en-us"
    daily_log_prefix: str = "Activity Log"
    pages: tuple[tuple[str, str], ...] = DEFAULT_PAGES


def load_config(path: Path) -> dict:
    if not path.exists():
        return {}
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix == ".toml":
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            print(f"Invalid TOML in config file {path}: {exc}", file=sys.stderr)
            sys.exit(1)
        return data
    if suffix in {".yml", ".yaml"}:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            print(f"Invalid YAML in config file {path}: {exc}", file=sys.stderr)
            sys.exit(1)
        if data is None:
            return {}
        if not isinstance(data, dict):
            print(f"YAML config must be a mapping: {path}", file=sys.stderr)
            sys.exit(1)
        return data
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        print(f"Invalid JSON in config file {path}: {exc}", file=sys.stderr)
        sys.exit(1)
    if not isinstance(data, dict):
        print(f"JSON config must be a mapping: {path}", file=sys.stderr)
        sys.exit(1)
    return data


def parse_id_rules(value: object) -> tuple[IdRule, ...]:
    """Build id rules from ``[[pattern, replacement], ...]`` config data."""
    if not value:
        return DEFAULT_ID_RULES
    rules = []
    for index, item in enumerate(value):
        if isinstance(item, str):
            pattern, replacement = item, ""
        elif isinstance(item, (list, tuple)) and 1 <= len(item) <= 2:
            pattern = str(item[0])
            replacement = str(item[1]) if len(item) == 2 else ""
        else:
            print(f"Invalid id rule #{index + 1}: {item!r}", file=sys.stderr)
            sys.exit(1)
        rules.append(IdRule.compile(f"rule-{index + 1}", pattern, replacement))
    return tuple(rules)


def parse_pages(value: object) -> tuple[tuple[str, str], ...]:
    """Build ``llms.txt`` page links from ``[{title, path}, ...]`` config data."""
    if not value:
        return DEFAULT_PAGES
    pages = []
    for index, item in enumerate(value):
        if isinstance(item, dict) and item.get("title"):
            pages.append((str(item["title"]), str(item.get("path", "/"))))
        elif isinstance(item, (list, tuple)) and len(item) == 2:
            pages.append((str(item[0]), str(item[1])))
        else:
            print(f"Invalid page #{index + 1}: {item!r}", file=sys.stderr)
            sys.exit(1)
    return tuple(pages)


def site_info_from_args(args: object) -> SiteInfo:
    return SiteInfo(
        name=getattr(args, "site_name", ""),
        url=(getattr(args, "site_url", "") or "").strip().rstrip("/"),
        description=getattr(args, "site_description", ""),
        scope=getattr(args, "scope", ""),
        author=getattr(args, "author", ""),
        license_notice=getattr(args, "license_notice", ""),
        language=getattr(args, "language", "en-us") or "en-us",
        daily_log_prefix=getattr(args, "daily_log_prefix", "Activity Log"),
        pages=parse_pages(getattr(args, "pages", None)),
    )


def collection_from_args(args: object) -> Collection:
    patterns = getattr(args, "patterns", None) or DEFAULT_PATTERNS
    return Collection(
        name=Path(getattr(args, "content")).name or "content",
        base_dir=Path(getattr(args, "content")),
        patterns=tuple(patterns),
        id_rules=parse_id_rules(getattr(args, "id_rules", None)),
    )
