from __future__ import annotations

import re
from pathlib import Path

import markdown

IMG_SRC_RE = re.compile(r'<img([^>]*?)src="([^"]+)"', re.IGNORECASE)


def absolutize_img_src(html_text: str, site_url: str, base_url: str) -> str:
    """Point relative ``<img src>`` values at ``site_url`` or ``base_url``."""

    def repl(match: re.Match) -> str:
        attrs = match.group(1)
        src = match.group(2)
        if src.startswith(("http://", "https://", "data:", "#")):
            return match.group(0)
        if src.startswith("/"):
            return f'<img{attrs}src="{site_url.rstrip("/")}/{src.lstrip("/")}"'
        src = src.removeprefix("./")
        return f'<img{attrs}src="{base_url.rstrip("/")}/{src}"'

    return IMG_SRC_RE.sub(repl, html_text)


def render_markdown(text: str) -> str:
    md = markdown.Markdown(extensions=["fenced_code", "tables"])
    return md.convert(text)


def cdata(text: str) -> str:
    return "<![CDATA[" + text.replace("]]>", "]]]]><![CDATA[>") + "]]>"


def write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
