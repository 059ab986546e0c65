"""
PageContext: the captured state a page script runs against.

Stands in for the live page a script would see in the browser: the
markup, the window-level hydration globals, the URLs the page already
fetched (resource timing entries) and the cookies to replay when one of
those URLs is fetched again. Built once per invocation, never mutated.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup, Comment, Doctype, Tag

logger = logging.getLogger(__name__)

_WS = re.compile(r"\s+")
_INVISIBLE_TAGS = frozenset({"script", "style", "noscript", "template", "head", "title"})


@dataclass(frozen=True)
class PageContext:
    url: str = ""
    html: str = ""
    title: str | None = None
    globals: Mapping[str, Any] = field(default_factory=dict)
    resource_urls: tuple[str, ...] = ()
    cookies: Mapping[str, str] = field(default_factory=dict)

    @cached_property
    def soup(self) -> BeautifulSoup:
        return BeautifulSoup(self.html, "html.parser")

    # ── Location ──────────────────────────────────────────────────────

    @property
    def hostname(self) -> str:
        return (urlparse(self.url).hostname or "").lower()

    @property
    def origin(self) -> str:
        parsed = urlparse(self.url)
        if not parsed.scheme or not parsed.netloc:
            return ""
        return f"{parsed.scheme}://{parsed.netloc}"

    def absolute(self, href: str | None) -> str | None:
        """Resolve a link the way the browser's .href / .src properties do."""
        if not href:
            return None
        href = href.strip()
        return urljoin(self.url, href) if self.url else href

    # ── Classifier inputs ─────────────────────────────────────────────

    @property
    def page_title(self) -> str:
        if self.title is not None:
            return self.title
        if self.soup.title and self.soup.title.string:
            return self.soup.title.string.strip()
        return ""

    @cached_property
    def heading_text(self) -> str:
        heading = self.soup.select_one("h1, h2, [role=heading]")
        return text_of(heading)

    @cached_property
    def asset_urls(self) -> list[str]:
        """src/href of every <script src> and <link href>, resolved."""
        urls: list[str] = []
        for el in self.soup.select("script[src], link[href]"):
            resolved = self.absolute(el.get("src") or el.get("href"))
            if resolved:
                urls.append(resolved)
        return urls

    def markup_head(self, limit: int) -> str:
        return self.html[:limit]

    # ── Embedded data ─────────────────────────────────────────────────

    def script_blocks(self, script_type: str) -> Iterator[tuple[Tag, str]]:
        """Yield (tag, raw text) for every <script type=...> block."""
        for script in self.soup.find_all("script", attrs={"type": script_type}):
            yield script, script.string or script.get_text() or ""

    def json_blocks(self, script_type: str) -> Iterator[tuple[Tag, str, Any]]:
        """Like script_blocks() but parsed; unparsable blocks are skipped."""
        for script, raw in self.script_blocks(script_type):
            try:
                yield script, raw, json.loads(raw)
            except (json.JSONDecodeError, ValueError):
                logger.debug("Skipping unparsable %s block (%d chars)", script_type, len(raw))

    def visible_text(self, max_chars: int) -> str:
        """
        Walk the text nodes under <body>, whitespace-collapsed, and stop
        once the character budget is exceeded.
        """
        root = self.soup.body or self.soup
        parts: list[str] = []
        size = 0
        for node in root.find_all(string=True):
            if isinstance(node, (Comment, Doctype)):
                continue
            if node.parent is not None and node.parent.name in _INVISIBLE_TAGS:
                continue
            text = _WS.sub(" ", str(node)).strip()
            if not text:
                continue
            parts.append(text)
            size += len(text) + 1
            if size > max_chars:
                break
        return " ".join(parts)[:max_chars]


def text_of(el: Tag | None) -> str:
    if el is None:
        return ""
    return _WS.sub(" ", el.get_text(" ")).strip()
