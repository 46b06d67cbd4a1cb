"""Chief-complaint lookup strategies.

Each strategy is a pure function ``(PageDocument) -> str | None``; the
extractor tries them in order and keeps the first answer.
"""

from __future__ import annotations

import re
from typing import Callable, Optional

from bs4 import Tag

from emr_copilot.extraction.document import PageDocument, field_value, text_of

ChiefComplaintStrategy = Callable[[PageDocument], Optional[str]]

COMPLAINT_LABELS = frozenset({"reason for visit", "reason for visit:", "chief complaint"})

_REASON_LINE = re.compile(r"Reason\s+For\s+Visit[:\s]*([^\n]+)", re.IGNORECASE)

_REASON_FIELDS = ", ".join(
    f'{tag}[{attr}*="{word}"]'
    for word in ("reason", "chief")
    for tag in ("input", "textarea")
    for attr in ("name", "id")
)


def _label_elements(doc: PageDocument) -> list[Tag]:
    """Elements whose whole visible text is a complaint label, outermost first.

    Whitespace is collapsed before comparing, so a label split across inline
    tags (``<b>Reason</b> for visit``) still matches on its container.
    """
    return [
        element
        for element in doc.soup.find_all(True)
        if " ".join(text_of(element, " ").split()).lower() in COMPLAINT_LABELS
    ]


def complaint_from_label(doc: PageDocument) -> Optional[str]:
    """Text of the element following a "Reason for visit" / "Chief complaint" label."""
    for label in _label_elements(doc):
        value_el = label.find_next_sibling()
        if value_el is None and label.parent is not None:
            value_el = label.parent.find_next_sibling()
        if value_el is None:
            continue
        text = text_of(value_el, " ").strip()
        if 5 < len(text) < 500:
            return text
    return None


def complaint_from_field(doc: PageDocument) -> Optional[str]:
    """Value of an input/textarea whose name or id mentions reason/chief."""
    for field in doc.select(_REASON_FIELDS):
        value = field_value(field).strip()
        if len(value) > 5:
            return value
    return None


def complaint_from_text(doc: PageDocument) -> Optional[str]:
    """Rest of the line after "Reason For Visit" in the page text."""
    match = _REASON_LINE.search(doc.body_text())
    if match:
        value = match.group(1).strip()
        return value or None
    return None


CHIEF_COMPLAINT_STRATEGIES: tuple[ChiefComplaintStrategy, ...] = (
    complaint_from_label,
    complaint_from_field,
    complaint_from_text,
)


def find_chief_complaint(
    doc: PageDocument,
    strategies: tuple[ChiefComplaintStrategy, ...] = CHIEF_COMPLAINT_STRATEGIES,
) -> Optional[str]:
    for strategy in strategies:
        result = strategy(doc)
        if result:
            return result
    return None
