"""Locate and fill the four SOAP narrative fields."""

from __future__ import annotations

import logging
from typing import Optional

from bs4 import Tag

from emr_copilot.extraction.document import PageDocument, text_of
from emr_copilot.models import SoapResult

log = logging.getLogger(__name__)

SOAP_FIELD_CANDIDATES: dict[str, tuple[str, ...]] = {
    "subjective": ("subjective", "soap_subjective", "s_text"),
    "objective": ("objective", "soap_objective", "o_text"),
    "assessment": ("assessment", "soap_assessment", "a_text"),
    "plan": ("plan", "soap_plan", "p_text"),
}

_FORM_FIELDS = ["textarea", "input"]
_LABEL_TAGS = ["label", "h2", "h3", "h4", "div"]
_MAX_LABEL_CHARS = 100


def _by_identifier(doc: PageDocument, candidates: tuple[str, ...]) -> Optional[Tag]:
    for candidate in candidates:
        element = doc.soup.find(_FORM_FIELDS, id=candidate) or doc.soup.find(
            _FORM_FIELDS, attrs={"name": candidate}
        )
        if element is not None:
            return element
    return None


def _by_partial_identifier(doc: PageDocument, key: str) -> Optional[Tag]:
    return doc.select_one(f'textarea[name*="{key}"], textarea[id*="{key}"]')


def _by_label(doc: PageDocument, key: str) -> Optional[Tag]:
    """A textarea inside or right after an element whose text mentions *key*."""
    for label in doc.soup.find_all(_LABEL_TAGS):
        text = text_of(label, " ").lower()
        if key not in text or len(text) > _MAX_LABEL_CHARS:
            continue
        parent = label.parent
        parent_next = parent.find_next_sibling() if isinstance(parent, Tag) else None
        for candidate in (
            label.find("textarea"),
            parent.find("textarea") if isinstance(parent, Tag) else None,
            parent_next.find("textarea") if parent_next is not None else None,
            label.find_next_sibling(),
        ):
            if candidate is not None and candidate.name == "textarea":
                return candidate
    return None


def find_soap_field(doc: PageDocument, key: str) -> Optional[Tag]:
    """Exact id/name candidates first, then partial names, then nearby labels."""
    return (
        _by_identifier(doc, SOAP_FIELD_CANDIDATES[key])
        or _by_partial_identifier(doc, key)
        or _by_label(doc, key)
    )


def insert_soap(doc: PageDocument, soap: SoapResult) -> list[str]:
    """Write each SOAP section into its field; return the sections written."""
    written: list[str] = []
    for key in SOAP_FIELD_CANDIDATES:
        value = getattr(soap, key)
        if not value:
            continue
        element = find_soap_field(doc, key)
        if element is None:
            log.debug("No field found for SOAP section %s", key)
            continue
        doc.set_field_value(element, value)
        written.append(key)
    return written
