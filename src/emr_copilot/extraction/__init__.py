"""Page content extraction, frame aggregation and code scanning."""

from __future__ import annotations

from emr_copilot.extraction.aggregator import FRAME_BOUNDARY, aggregate_fragments
from emr_copilot.extraction.code_scanner import scan_codes
from emr_copilot.extraction.document import PageDocument
from emr_copilot.extraction.extractor import ContentExtractor
from emr_copilot.extraction.page_classifier import classify_page, is_openemr_page

__all__ = [
    "FRAME_BOUNDARY",
    "ContentExtractor",
    "PageDocument",
    "aggregate_fragments",
    "classify_page",
    "is_openemr_page",
    "scan_codes",
]
