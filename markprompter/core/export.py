"""Full-markdown HTML rendering used for export and content validation.

The scrolling view only understands headings and one pass of inline styles;
everything else (lists, tables, links, footnotes) is handled here by
Python-Markdown.
"""

from __future__ import annotations

import html
import re
import xml.etree.ElementTree as etree
from pathlib import Path
from typing import Optional

import markdown
from markdown.extensions import Extension
from markdown.inlinepatterns import SimpleTagInlineProcessor
from markdown.treeprocessors import Treeprocessor

from .document import Document
from .themes import DEFAULT_THEME, Theme

STRIKETHROUGH_RE = r"(~{2})(.+?)~{2}"
TASK_MARKER = re.compile(r"^\[([ xX])\]\s+")


class StrikethroughExtension(Extension):
    """``~~text~~`` -> ``<del>text</del>``."""

    def extendMarkdown(self, md) -> None:  # type: ignore[override]
        md.inlinePatterns.register(SimpleTagInlineProcessor(STRIKETHROUGH_RE, "del"), "strikethrough", 65)


class _TaskListProcessor(Treeprocessor):
    def run(self, root) -> None:
        for item in root.iter("li"):
            target = item
            if not (item.text or "").strip() and len(item) and item[0].tag == "p":
                target = item[0]
            match = TASK_MARKER.match(target.text or "")
            if not match:
                continue
            checkbox = etree.Element("input", {"type": "checkbox", "disabled": "disabled"})
            if match.group(1).lower() == "x":
                checkbox.set("checked", "checked")
            checkbox.tail = target.text[match.end():]
            target.text = ""
            target.insert(0, checkbox)
            item.set("class", "task-list-item")


class TaskListExtension(Extension):
    """``- [ ] todo`` / ``- [x] done`` list items -> disabled checkboxes."""

    def extendMarkdown(self, md) -> None:  # type: ignore[override]
        # Runs before the inline processor (priority 20) so "[x]" is never read as a link.
        md.treeprocessors.register(_TaskListProcessor(md), "task_list", 25)


def render_html(
    text: str,
    *,
    strikethrough: bool = True,
    tables: bool = True,
    task_lists: bool = True,
    footnotes: bool = True,
) -> str:
    extensions: list = ["fenced_code", "sane_lists"]
    if tables:
        extensions.append("tables")
    if footnotes:
        extensions.append("footnotes")
    if strikethrough:
        extensions.append(StrikethroughExtension())
    if task_lists:
        extensions.append(TaskListExtension())
    return markdown.markdown(text, extensions=extensions)


def _css_rgb(color) -> str:
    return "rgb({}, {}, {})".format(*color)


def _page_css(theme: Theme, font_size: float) -> str:
    rules = [
        f"body {{ background: {_css_rgb(theme.background_rgb)}; color: {_css_rgb(theme.text_rgb)}; "
        f"font-family: sans-serif; font-size: {font_size:.0f}px; line-height: 1.5; "
        "max-width: 52em; margin: 2em auto; padding: 0 1em; }",
        "code { font-family: monospace; background: rgba(80, 80, 80, 0.16); padding: 0 0.2em; }",
        "pre code { display: block; padding: 0.6em; }",
        "table { border-collapse: collapse; } th, td { border: 1px solid currentColor; padding: 0.2em 0.5em; }",
        "li.task-list-item { list-style: none; }",
    ]
    for level in range(1, 7):
        rules.append(f"h{level} {{ color: {_css_rgb(theme.heading_color(level))}; }}")
    return "\n".join(rules)


def export_html(
    document: Document,
    target: Path | str,
    *,
    theme: Optional[Theme] = None,
    font_size: float = 18.0,
) -> Path:
    """Write a standalone, themed HTML page for the document and return its path."""
    theme = theme or DEFAULT_THEME
    body = render_html(document.text)
    title = html.escape(document.title or "MarkPrompter export")
    page = (
        "<!DOCTYPE html>\n"
        "<html>\n<head>\n<meta charset=\"utf-8\">\n"
        f"<title>{title}</title>\n"
        f"<style>\n{_page_css(theme, font_size)}\n</style>\n"
        "</head>\n<body>\n"
        f"{body}\n"
        "</body>\n</html>\n"
    )
    out = Path(target)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(page, encoding="utf-8")
    return out
