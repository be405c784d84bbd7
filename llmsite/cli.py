from __future__ import annotations

import argparse
import datetime as dt
import sys
import time
from pathlib import Path

from .collection import DEFAULT_PATTERNS, load_collection
from .config import collection_from_args, load_config, site_info_from_args
from .errors import CollectionError
from .feeds import build_rss
from .manifests import MAX_FULL_SIZE, build_llms_full_txt, build_llms_txt
from .render import write_text
from .utils import as_utc, parse_bool, parse_int


def parse_build_time(value: str) -> dt.datetime:
    if not value:
        return dt.datetime.now(dt.timezone.utc)
    try:
        return as_utc(dt.datetime.fromisoformat(value))
    except ValueError:
        print(f"Invalid --build-time value: {value}", file=sys.stderr)
        sys.exit(1)


def build_site(args: argparse.Namespace, now: dt.datetime) -> dict[str, Path]:
    """Load the collection once and write every enabled output.

    Returns the written files keyed by output name.
    """
    content_dir = Path(args.content)
    output_dir = Path(args.output)
    site = site_info_from_args(args)
    collection = collection_from_args(args)

    entries = load_collection(collection, include_drafts=parse_bool(args.include_drafts))
    print(f"Loaded {len(entries)} entries from {content_dir}")

    outputs: dict[str, str] = {}
    if args.enable_llms:
        outputs["llms.txt"] = build_llms_txt(entries, site, now)
        outputs["llms-full.txt"] = build_llms_full_txt(
            entries,
            site,
            now,
            articles_dir=content_dir / args.articles_dir,
            daily_logs_dir=content_dir / args.daily_logs_dir,
            max_size=args.max_full_size,
        )
    if args.enable_rss:
        outputs["rss.xml"] = build_rss(
            entries, site, feed_limit=args.feed_limit, include_content=args.feed_content
        )

    written = {}
    for name, text in outputs.items():
        path = output_dir / name
        write_text(path, text)
        written[name] = path
    return written


def main(argv: list[str] | None = None) -> None:
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument(
        "--config",
        default="site.toml",
        help="Path to site config file (TOML/YAML/JSON).",
    )
    pre_args, _ = pre_parser.parse_known_args(argv)
    config = load_config(Path(pre_args.config))

    def cfg_value(key: str, default: object) -> object:
        value = config.get(key)
        return default if value is None else value

    def cfg_str(key: str, default: str) -> str:
        value = cfg_value(key, default)
        return default if value is None else str(value)

    def cfg_bool(key: str, default: bool) -> bool:
        value = cfg_value(key, default)
        return parse_bool(value) if value is not None else default

    def cfg_int(key: str, default: int) -> int:
        value = cfg_value(key, default)
        return parse_int(value, default)

    def cfg_list(key: str, default: object) -> object:
        value = cfg_value(key, default)
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    parser = argparse.ArgumentParser(description="Generate llms.txt, llms-full.txt and rss.xml from markdown content.")
    parser.add_argument("--config", default=pre_args.config, help="Path to site config file (TOML/YAML/JSON).")
    parser.add_argument(
        "--content",
        default=cfg_str("content", "src/content/writing"),
        help="Directory containing the markdown collection.",
    )
    parser.add_argument("--output", default=cfg_str("output", "dist"), help="Output directory.")
    parser.add_argument("--site-name", default=cfg_str("site_name", "My Site"), help="Site title.")
    parser.add_argument(
        "--site-url",
        default=cfg_str("site_url", ""),
        help="Public site URL used for canonical links and the feed.",
    )
    parser.add_argument(
        "--site-description",
        default=cfg_str("site_description", "A personal website."),
        help="Site description.",
    )
    parser.add_argument("--author", default=cfg_str("author", ""), help="Name used in the license line.")
    parser.add_argument(
        "--scope",
        default=cfg_str("scope", "All public content including articles and daily logs."),
        help="Scope paragraph for llms.txt.",
    )
    parser.add_argument(
        "--license-notice",
        default=cfg_str("license_notice", "Short quotations with attribution welcome."),
        help="Text following the copyright line in llms.txt.",
    )
    parser.add_argument("--language", default=cfg_str("language", "en-us"), help="Feed language code.")
    parser.add_argument(
        "--daily-log-prefix",
        default=cfg_str("daily_log_prefix", "Activity Log"),
        help="Titles starting with this prefix are daily logs.",
    )
    parser.add_argument(
        "--articles-dir",
        default=cfg_str("articles_dir", "articles"),
        help="Folder of the collection holding article sources.",
    )
    parser.add_argument(
        "--daily-logs-dir",
        default=cfg_str("daily_logs_dir", "daily-logs"),
        help="Folder of the collection holding daily log sources.",
    )
    parser.add_argument(
        "--pattern",
        dest="patterns",
        action="append",
        default=None,
        help="Glob pattern for collection files; prefix with ! to exclude. Repeatable.",
    )
    parser.add_argument(
        "--feed-limit",
        default=cfg_int("feed_limit", 0),
        type=int,
        help="Maximum number of items in rss.xml (0 = all).",
    )
    parser.add_argument(
        "--feed-content",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("feed_content", False),
        help="Include rendered HTML bodies in rss.xml.",
    )
    parser.add_argument(
        "--enable-rss",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("enable_rss", True),
        help="Generate rss.xml.",
    )
    parser.add_argument(
        "--enable-llms",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("enable_llms", True),
        help="Generate llms.txt and llms-full.txt.",
    )
    parser.add_argument(
        "--include-drafts",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("include_drafts", False),
        help="Keep entries marked draft.",
    )
    parser.add_argument(
        "--max-full-size",
        default=cfg_int("max_full_size", MAX_FULL_SIZE),
        type=int,
        help="Warn when llms-full.txt exceeds this many bytes.",
    )
    parser.add_argument(
        "--build-time",
        default="",
        help="ISO timestamp used as the generation time (default: now).",
    )
    args = parser.parse_args(argv)
    if args.patterns is None:
        args.patterns = cfg_list("patterns", list(DEFAULT_PATTERNS))
    args.id_rules = config.get("id_rules")
    args.pages = config.get("pages")

    now = parse_build_time(args.build_time)
    start = time.perf_counter()
    try:
        written = build_site(args, now)
    except CollectionError as exc:
        print(f"Build failed: {exc}", file=sys.stderr)
        sys.exit(1)
    elapsed = time.perf_counter() - start
    print(f"Build completed in {elapsed:.2f}s.")
    if written:
        print(f"Site generated in: {args.output}")
