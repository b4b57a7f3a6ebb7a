"""
HTML Document Module
====================

A small document-query interface used by the crawler and the content
extractor, with a BeautifulSoup-backed implementation. Callers only rely on
CSS-selector lookups, attribute reads, text and markup extraction, and
node removal.
"""

from __future__ import annotations

from typing import Protocol

from bs4 import BeautifulSoup
from bs4.element import Tag


class HtmlNode(Protocol):
    """Query capability over an element or a whole document."""

    def query_one(self, selector: str) -> HtmlNode | None:
        """Return the first descendant matching a CSS selector."""
        ...

    def query_all(self, selector: str) -> list[HtmlNode]:
        """Return every descendant matching a CSS selector, in document order."""
        ...

    def attr(self, name: str) -> str | None:
        """Read an attribute value."""
        ...

    def text(self) -> str:
        """Concatenated text of the node and its descendants."""
        ...

    def inner_html(self) -> str:
        """Markup of the node's children."""
        ...

    def remove(self) -> None:
        """Detach the node from its document."""
        ...


class SoupNode:
    """HtmlNode backed by a BeautifulSoup element."""

    def __init__(self, element: Tag) -> None:
        self._element = element

    def query_one(self, selector: str) -> SoupNode | None:
        found = self._element.select_one(selector)
        return SoupNode(found) if found is not None else None

    def query_all(self, selector: str) -> list[SoupNode]:
        return [SoupNode(el) for el in self._element.select(selector)]

    def attr(self, name: str) -> str | None:
        value = self._element.get(name)
        if isinstance(value, list):
            # Multi-valued attributes such as class
            return " ".join(value)
        return value

    def text(self) -> str:
        return self._element.get_text()

    def inner_html(self) -> str:
        return self._element.decode_contents()

    def remove(self) -> None:
        self._element.extract()

    def __repr__(self) -> str:
        return f"<SoupNode({self._element.name})>"


def parse_html(html: str) -> SoupNode:
    """Parse a document into a queryable root node."""
    return SoupNode(BeautifulSoup(html, "html.parser"))
