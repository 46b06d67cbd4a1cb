"""Parsed page wrapper: BeautifulSoup tree plus URL, title and an event log.

A ``PageDocument`` stands in for one browsing context (the top window or one
embedded frame). Reads render text roughly the way a browser's ``innerText``
would; writes record ``input``/``change`` notifications so callers can replay
them against the live page.
"""

from __future__ import annotations

import dataclasses
from pathlib import Path
from typing import Optional
from urllib.parse import parse_qs, urlparse

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

_HIDDEN_TAGS = frozenset({"script", "style", "noscript", "template", "head", "title"})


@dataclasses.dataclass(frozen=True)
class DomEvent:
    """A change notification emitted after a write."""

    type: str
    tag: str
    element_id: str = ""
    name: str = ""
    bubbles: bool = True


def text_of(element: Tag | NavigableString | None, separator: str = "\n") -> str:
    """Visible text of *element*, one stripped string per *separator*."""
    if element is None:
        return ""
    if isinstance(element, NavigableString):
        return str(element).strip()
    parts: list[str] = []
    for string in element.find_all(string=True):
        if isinstance(string, Comment):
            continue
        if string.parent is not None and string.parent.name in _HIDDEN_TAGS:
            continue
        stripped = string.strip()
        if stripped:
            parts.append(stripped)
    return separator.join(parts)


def field_value(element: Tag) -> str:
    """Current value of an ``input``/``textarea``/``select`` element."""
    if element.name == "textarea":
        return element.get_text()
    if element.name == "select":
        selected = element.find("option", selected=True) or element.find("option")
        return selected.get("value", selected.get_text()) if selected else ""
    return str(element.get("value", ""))


class PageDocument:
    """One parsed document tree (top-level page or embedded frame)."""

    def __init__(
        self,
        html: str,
        *,
        url: str = "",
        title: Optional[str] = None,
        is_top_level: bool = True,
    ) -> None:
        self.soup = BeautifulSoup(html, "html.parser")
        self.url = url
        if title is None:
            title_tag = self.soup.find("title")
            title = title_tag.get_text(strip=True) if title_tag else ""
        self.title = title
        self.is_top_level = is_top_level
        self.events: list[DomEvent] = []

    @classmethod
    def from_file(cls, path: Path, *, url: str = "", is_top_level: bool = True) -> PageDocument:
        return cls(path.read_text(encoding="utf-8"), url=url, is_top_level=is_top_level)

    # ── Reads ────────────────────────────────────────────────────────

    @property
    def body(self) -> Tag:
        return self.soup.body or self.soup

    def body_text(self) -> str:
        return text_of(self.body)

    def query_params(self) -> dict[str, str]:
        """First value of each query-string parameter in the page URL."""
        if not self.url:
            return {}
        parsed = parse_qs(urlparse(self.url).query)
        return {key: values[0] for key, values in parsed.items() if values}

    def select_one(self, selector: str) -> Optional[Tag]:
        return self.soup.select_one(selector)

    def select(self, selector: str) -> list[Tag]:
        return list(self.soup.select(selector))

    # ── Writes ───────────────────────────────────────────────────────

    def set_field_value(self, element: Tag, value: str) -> None:
        """Write *value* into a form field and record input/change events."""
        if element.name == "textarea":
            element.string = value
        else:
            element["value"] = value
        self.dispatch(element, "input")
        self.dispatch(element, "change")

    def dispatch(self, element: Tag, event_type: str) -> None:
        self.events.append(
            DomEvent(
                type=event_type,
                tag=element.name or "",
                element_id=str(element.get("id", "")),
                name=str(element.get("name", "")),
            )
        )

    def new_tag(self, tag_name: str, **attrs: str) -> Tag:
        """Create a detached element; attribute names may include ``name`` or dashes."""
        return self.soup.new_tag(tag_name, attrs=attrs)

    def render(self) -> str:
        """Serialize the (possibly modified) tree back to HTML."""
        return str(self.soup)

    def __repr__(self) -> str:
        return f"PageDocument(url={self.url!r}, title={self.title!r}, top={self.is_top_level})"
