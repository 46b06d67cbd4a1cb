"""Page content extraction into a bounded corpus plus identifying metadata."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from emr_copilot.core.config import ExtractionConfig
from emr_copilot.extraction.document import PageDocument, field_value, text_of
from emr_copilot.extraction.page_classifier import classify_page
from emr_copilot.extraction.strategies import find_chief_complaint
from emr_copilot.models import ExtractionResult, FrameFragment, PageMetadata

if TYPE_CHECKING:
    from bs4 import Tag

log = logging.getLogger(__name__)

# (corpus heading, class/id substring)
SECTION_SELECTORS: tuple[tuple[str, str], ...] = (
    ("PATIENT", "patient"),
    ("DEMOGRAPHICS", "demographic"),
    ("VITALS", "vital"),
    ("MEDICATIONS", "medication"),
    ("ALLERGIES", "allerg"),
    ("PROBLEMS", "problem"),
)

_PATIENT_ID_FIELDS = ("pid", "patient_id")
_ENCOUNTER_ID_FIELDS = ("encounter", "encounter_id")


def _section_selector(fragment: str) -> str:
    return f'[class*="{fragment}" i], [id*="{fragment}" i]'


class ContentExtractor:
    """Turns one :class:`PageDocument` into an :class:`ExtractionResult`.

    ``extract`` never raises: any internal failure degrades to a plain text
    dump of the page body.
    """

    def __init__(self, config: ExtractionConfig | None = None) -> None:
        self._config = config or ExtractionConfig()

    def extract(self, doc: PageDocument) -> ExtractionResult:
        try:
            return ExtractionResult(text=self._build_corpus(doc), metadata=self.metadata(doc))
        except Exception:
            log.exception("Extraction failed for %s, falling back to raw text", doc.url or "<page>")
            return self._fallback(doc)

    def extract_fragment(self, doc: PageDocument) -> FrameFragment:
        result = self.extract(doc)
        return FrameFragment(text=result.text, metadata=result.metadata, is_top_level=doc.is_top_level)

    def _fallback(self, doc: PageDocument) -> ExtractionResult:
        try:
            text = doc.body_text()
        except Exception:
            log.exception("Raw text fallback failed")
            text = ""
        return ExtractionResult(text=text[: self._config.fallback_chars])

    # ── Sections ─────────────────────────────────────────────────────

    def sections(self, doc: PageDocument) -> dict[str, str]:
        """Text of each known section present and non-empty on the page."""
        found: dict[str, str] = {}
        for heading, fragment in SECTION_SELECTORS:
            element = doc.select_one(_section_selector(fragment))
            if element is None:
                continue
            text = text_of(element).strip()
            if text:
                found[heading] = text
        return found

    @staticmethod
    def notes(doc: PageDocument) -> list[str]:
        return [
            value
            for value in (field_value(t).strip() for t in doc.select("textarea"))
            if len(value) > 10
        ]

    def tables(self, doc: PageDocument) -> list[str]:
        lo, hi = self._config.min_table_chars, self._config.max_table_chars
        texts = []
        for table in doc.select("table"):
            text = text_of(table, " | ").strip()
            if lo < len(text) < hi:
                texts.append(text)
        return texts

    def _build_corpus(self, doc: PageDocument) -> str:
        page_type = classify_page(doc.url, doc.title)
        parts = [f"PAGE TYPE: {page_type}", f"URL: {doc.url}", f"TITLE: {doc.title}", ""]

        sections = self.sections(doc)
        complaint = find_chief_complaint(doc)

        def _add(heading: str, body: Optional[str]) -> None:
            if body:
                parts.extend([f"{heading}:", body, ""])

        _add("PATIENT", sections.get("PATIENT"))
        _add("DEMOGRAPHICS", sections.get("DEMOGRAPHICS"))
        _add("CHIEF COMPLAINT / REASON FOR VISIT", complaint)
        for heading in ("VITALS", "MEDICATIONS", "ALLERGIES", "PROBLEMS"):
            _add(heading, sections.get(heading))
        _add("CLINICAL NOTES", "\n".join(self.notes(doc)))
        _add("TABLE DATA", "\n\n".join(self.tables(doc)))

        parts.extend(["RAW PAGE CONTENT:", doc.body_text()[: self._config.raw_text_chars]])
        return "\n".join(parts)[: self._config.max_corpus_chars]

    # ── Metadata ─────────────────────────────────────────────────────

    @staticmethod
    def _input_value(doc: PageDocument, names: tuple[str, ...]) -> Optional[str]:
        for name in names:
            element: Tag | None = doc.select_one(f'input[name="{name}"]')
            if element is not None:
                value = field_value(element).strip()
                if value:
                    return value
        return None

    def metadata(self, doc: PageDocument) -> PageMetadata:
        """Patient/encounter ids from URL parameters, else from hidden inputs."""
        params = doc.query_params()
        return PageMetadata(
            patient_id=params.get("pid") or self._input_value(doc, _PATIENT_ID_FIELDS),
            encounter_id=params.get("encounter") or self._input_value(doc, _ENCOUNTER_ID_FIELDS),
            source_url=doc.url,
        )
