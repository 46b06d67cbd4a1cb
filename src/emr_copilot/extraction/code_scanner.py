"""Regex scan of a corpus for billing and terminology codes.

No endpoint call is involved; each coding system is gated by its option toggle.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from emr_copilot.models import CodeScanResult

if TYPE_CHECKING:
    from emr_copilot.persistence.options_store import CopilotOptions

ICD10_PATTERN = re.compile(r"\b[A-TV-Z]\d{2}(?:\.\d{1,4})?\b")
CPT_PATTERN = re.compile(r"\b\d{5}\b")
SNOMED_PATTERN = re.compile(r"SNOMED(?:[: ]+CT)?[: ]*(\d{6,18})\b", re.IGNORECASE)


def _unique(matches: list[str]) -> list[str]:
    return list(dict.fromkeys(matches))


def scan_codes(text: str, options: CopilotOptions | None = None) -> CodeScanResult:
    """Distinct codes in order of first appearance."""
    icd10 = options.icd10 if options else True
    cpt = options.cpt if options else True
    snomed = options.snomed if options else True
    return CodeScanResult(
        icd10=_unique(ICD10_PATTERN.findall(text)) if icd10 else [],
        cpt=_unique(CPT_PATTERN.findall(text)) if cpt else [],
        snomed=_unique(SNOMED_PATTERN.findall(text)) if snomed else [],
    )
