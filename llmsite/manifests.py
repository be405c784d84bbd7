from __future__ import annotations

import datetime as dt
from pathlib import Path

from .collection import ContentEntry
from .config import SiteInfo
from .content import demote_headings, strip_front_matter
from .utils import iso_timestamp, join_url, warn

ARTICLE = "Article"
DAILY_LOG = "Daily Log"
MAX_FULL_SIZE = 1024 * 1024


def category_of(title: str, daily_log_prefix: str) -> str:
    return DAILY_LOG if title.startswith(daily_log_prefix) else ARTICLE


def sort_by_date(entries: list[ContentEntry]) -> list[ContentEntry]:
    # sorted() is stable with reverse=True, so equal dates keep scan order.
    return sorted(entries, key=lambda entry: entry.date, reverse=True)


def partition(
    entries: list[ContentEntry], daily_log_prefix: str
) -> tuple[list[ContentEntry], list[ContentEntry]]:
    articles = []
    daily_logs = []
    for entry in entries:
        if category_of(entry.title, daily_log_prefix) == DAILY_LOG:
            daily_logs.append(entry)
        else:
            articles.append(entry)
    return sort_by_date(articles), sort_by_date(daily_logs)


def canonical_url(site_url: str, entry_id: str) -> str:
    return join_url(site_url, f"articles/{entry_id}")


def page_url(site_url: str, path: str) -> str:
    return f"{site_url.rstrip('/')}/{path.lstrip('/')}"


def build_link_list(entries: list[ContentEntry], site_url: str, placeholder: str) -> str:
    if not entries:
        return placeholder
    return "\n".join(f"- [{entry.title}]({canonical_url(site_url, entry.id)})" for entry in entries)


def build_llms_txt(entries: list[ContentEntry], site: SiteInfo, now: dt.datetime) -> str:
    """Render the short ``llms.txt`` index.

    ``now`` supplies both the generation timestamp and the copyright year.
    """
    build_time = iso_timestamp(now)
    articles, daily_logs = partition(entries, site.daily_log_prefix)
    pages = "\n".join(f"- [{title}]({page_url(site.url, path)})" for title, path in site.pages)
    license_line = f"© {now.year} {site.author}. {site.license_notice}".rstrip()
    sections = [
        f"# {site.name}",
        f"> {site.description} Generated: {build_time}",
        "",
        "## Scope",
        site.scope,
        "",
        "## Content",
        "",
        "### Articles",
        build_link_list(articles, site.url, "No articles yet"),
        "",
        "### Daily Logs",
        build_link_list(daily_logs, site.url, "No daily logs yet"),
        "",
        "## Pages",
        pages,
        "",
        "## Full Content",
        f"For complete markdown content, see [llms-full.txt]({page_url(site.url, 'llms-full.txt')})",
        "",
        "## License",
        license_line,
        "",
        f"Generated: {build_time}",
    ]
    return "\n".join(sections) + "\n"


def locate_source(entry: ContentEntry, search_dir: Path, allow_date_prefix: bool = False) -> Path | None:
    """Find the markdown file behind ``entry``, or ``None``.

    The entry's own path wins when it still exists. Otherwise ``search_dir``
    is scanned for ``{id}.md`` and, with ``allow_date_prefix``, for a name
    ending in ``-{id}.md``.
    """
    if entry.source_path.is_file():
        return entry.source_path
    exact = f"{entry.id}.md"
    suffix = f"-{entry.id}.md"
    try:
        names = sorted(path.name for path in search_dir.iterdir() if path.is_file())
    except OSError:
        warn(f"Could not list directory {search_dir}")
        return None
    for name in names:
        if name == exact or (allow_date_prefix and name.endswith(suffix)):
            return search_dir / name
    return None


def read_source(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        warn(f"Could not read {path}: {exc}")
        return None


def check_output_size(text: str, name: str, limit: int = MAX_FULL_SIZE) -> int:
    size = len(text.encode("utf-8"))
    if size > limit:
        warn(f"{name} is {size / 1024:.2f}KB - consider splitting")
    return size


def render_entry_block(entry: ContentEntry, raw_text: str, site: SiteInfo, label: str) -> str:
    body = demote_headings(strip_front_matter(raw_text))
    return "\n".join(
        [
            f"### {entry.title}",
            f"**URL**: {canonical_url(site.url, entry.id)}",
            f"**Date**: {entry.date.isoformat()}",
            f"**Type**: {label}",
            "",
            body.strip("\n"),
            "",
            "---",
            "",
            "",
        ]
    )


def build_llms_full_txt(
    entries: list[ContentEntry],
    site: SiteInfo,
    now: dt.datetime,
    articles_dir: Path,
    daily_logs_dir: Path,
    max_size: int = MAX_FULL_SIZE,
) -> str:
    """Concatenate the untouched markdown of every entry into ``llms-full.txt``.

    Bodies come from the source files on disk rather than any parsed form.
    Entries whose file is missing or unreadable are skipped with a warning.
    """
    build_time = iso_timestamp(now)
    articles, daily_logs = partition(entries, site.daily_log_prefix)
    parts = [
        f"# {site.name} - Full Content\n"
        f"> Complete markdown content of all public articles and daily logs. Generated: {build_time}\n"
        "\n"
        "## Site Information\n"
        f"{site.description}\n"
        "\n"
        "---\n"
        "\n"
        "## Articles\n"
        "\n"
    ]

    sources = [
        (articles, articles_dir, True, ARTICLE, "article"),
        (daily_logs, daily_logs_dir, False, DAILY_LOG, "daily log"),
    ]
    for index, (group, search_dir, allow_prefix, label, noun) in enumerate(sources):
        if index:
            parts.append("## Daily Logs\n\n")
        for entry in group:
            path = locate_source(entry, search_dir, allow_date_prefix=allow_prefix)
            if path is None:
                warn(f"Could not find {noun} file for: {entry.id}")
                continue
            raw_text = read_source(path)
            if raw_text is None:
                warn(f"Could not read {noun}: {entry.id}")
                continue
            parts.append(render_entry_block(entry, raw_text, site, label))

    parts.append(
        "## Footer\n"
        f"Generated: {build_time}\n"
        f"Total Articles: {len(articles)}\n"
        f"Total Daily Logs: {len(daily_logs)}\n"
    )
    full_text = "".join(parts)
    check_output_size(full_text, "llms-full.txt", max_size)
    return full_text
