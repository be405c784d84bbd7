from __future__ import annotations

import html

from .collection import ContentEntry
from .config import SiteInfo
from .content import strip_front_matter
from .manifests import read_source, sort_by_date
from .render import absolutize_img_src, cdata, render_markdown
from .utils import join_url, rfc822_date

CONTENT_NS = "http://purl.org/rss/1.0/modules/content/"


def entry_link(site_url: str, entry_id: str) -> str:
    path = f"/articles/{entry_id}/"
    if not site_url:
        return path
    return join_url(site_url, path)


def render_entry_content(entry: ContentEntry, site_url: str, link: str) -> str:
    raw_text = read_source(entry.source_path)
    if raw_text is None:
        return ""
    html_content = render_markdown(strip_front_matter(raw_text))
    if site_url:
        html_content = absolutize_img_src(html_content, site_url, link)
    return html_content


def build_item(entry: ContentEntry, site_url: str, include_content: bool) -> str:
    link = entry_link(site_url, entry.id)
    permalink = "true" if site_url else "false"
    lines = [
        "<item>",
        f"<title>{html.escape(entry.title)}</title>",
        f"<link>{html.escape(link)}</link>",
        f'<guid isPermaLink="{permalink}">{html.escape(link)}</guid>',
        f"<description>{html.escape(entry.description or '')}</description>",
        f"<pubDate>{rfc822_date(entry.date)}</pubDate>",
    ]
    for tag in entry.tags:
        lines.append(f"<category>{html.escape(tag)}</category>")
    if include_content:
        lines.append(f"<content:encoded>{cdata(render_entry_content(entry, site_url, link))}</content:encoded>")
    lines.append("</item>")
    return "\n".join(lines)


def build_rss(
    entries: list[ContentEntry],
    site: SiteInfo,
    feed_limit: int = 0,
    include_content: bool = False,
) -> str:
    """Render an RSS 2.0 feed with one item per entry, newest first.

    Articles and daily logs are both included. ``feed_limit`` of zero keeps
    every entry. ``lastBuildDate`` follows the newest entry, not the clock.
    """
    posts = sort_by_date(entries)
    if feed_limit > 0:
        posts = posts[:feed_limit]
    items = [build_item(entry, site.url, include_content) for entry in posts]
    channel_link = f"{site.url}/" if site.url else "/"
    rss_open = '<rss version="2.0">'
    if include_content:
        rss_open = f'<rss version="2.0" xmlns:content="{CONTENT_NS}">'
    header = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        rss_open,
        "<channel>",
        f"<title>{html.escape(site.name)}</title>",
        f"<link>{html.escape(channel_link)}</link>",
        f"<description>{html.escape(site.description)}</description>",
        f"<language>{html.escape(site.language)}</language>",
    ]
    if posts:
        header.append(f"<lastBuildDate>{rfc822_date(posts[0].date)}</lastBuildDate>")
    return "\n".join(header + items + ["</channel>", "</rss>"]) + "\n"
