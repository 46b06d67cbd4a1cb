"""Plain-text rendering of assistant results, copy text and navigation links."""

from __future__ import annotations

from typing import Optional
from urllib.parse import urlparse

from emr_copilot.models import (
    CodeScanResult,
    FeeSlipResult,
    InsertionPayload,
    PageMetadata,
    SoapResult,
)

CACHED_NOTICE = "Using previously generated codes for this encounter"
NO_CODES_MESSAGE = "I couldn't find any specific ICD-10 or CPT codes in the text."

_FORM_PATH = "/patient_file/encounter/load_form.php?formname={form}&pid={pid}&encounter={encounter}"
_DEMOGRAPHICS_PATH = "/patient_file/summary/demographics.php?pid={pid}"


def _money(value: Optional[float]) -> str:
    return "" if value is None else f"${value:,.2f}"


def interface_base_url(source_url: str) -> str:
    """``<origin><install path>/interface`` for an OpenEMR page URL."""
    parsed = urlparse(source_url or "")
    if not parsed.scheme or not parsed.netloc:
        return ""
    install_path = parsed.path.split("/interface/")[0]
    return f"{parsed.scheme}://{parsed.netloc}{install_path}/interface"


class TextFormatter:
    """Renders replies as plain text for the CLI and the HTTP API."""

    # ── Links and footer ─────────────────────────────────────────────

    @staticmethod
    def navigation_links(metadata: PageMetadata) -> dict[str, str]:
        """SOAP, fee sheet, vitals and demographics links for the current patient."""
        if not metadata.patient_id:
            return {}
        base = interface_base_url(metadata.source_url)
        fmt = {"pid": metadata.patient_id, "encounter": metadata.encounter_id or ""}
        return {
            "soap": base + _FORM_PATH.format(form="soap", **fmt),
            "fee_sheet": base + _FORM_PATH.format(form="fee_sheet", **fmt),
            "vitals": base + _FORM_PATH.format(form="vitals", **fmt),
            "demographics": base + _DEMOGRAPHICS_PATH.format(pid=metadata.patient_id),
        }

    @staticmethod
    def context_label(metadata: PageMetadata) -> str:
        url = metadata.source_url or ""
        if "fee_sheet" in url:
            return "Fee Sheet"
        if "encounter" in url:
            return "Encounter"
        if "demographics" in url:
            return "Patient Chart"
        return "OpenEMR"

    def footer(self, metadata: PageMetadata) -> str:
        source = urlparse(metadata.source_url).path if metadata.source_url else ""
        lines = [f"Source ({self.context_label(metadata)}): {source or 'No source available'}"]
        if metadata.patient_id:
            ids = f"Patient ID: {metadata.patient_id}"
            if metadata.encounter_id:
                ids += f" • Encounter: {metadata.encounter_id}"
            lines.append(ids)
        return "\n".join(lines)

    # ── Results ──────────────────────────────────────────────────────

    @staticmethod
    def soap(result: SoapResult) -> str:
        return (
            "Here is the drafted SOAP note based on the patient's records:\n\n"
            f"S: {result.subjective}\n\n"
            f"O: {result.objective}\n\n"
            f"A: {result.assessment}\n\n"
            f"P: {result.plan}"
        )

    @staticmethod
    def fee_slip(result: FeeSlipResult, *, cached: bool = False) -> str:
        lines = [f"Fee Slip for {result.patient_name or 'Unknown patient'}"]
        if cached:
            lines.append(CACHED_NOTICE)
        lines.append("")
        lines.append("Diagnoses:")
        lines.extend(f"  - {d}" for d in result.diagnoses)
        lines.append("Services Rendered:")
        lines.extend(f"  - {s}" for s in result.services)
        lines.append("Billing Codes:")
        lines.extend(f"  • ICD-10 {i.code}: {i.desc}" for i in result.billing.icd)
        lines.extend(f"  • CPT {c.code}: {c.desc}" for c in result.billing.cpt)
        lines.append("Charges:")
        lines.extend(f"  • {c.code}: {_money(c.price)}" for c in result.billing.cpt if c.price is not None)
        if result.total is not None:
            lines.append(f"Total: {_money(result.total)}")
        return "\n".join(lines)

    @staticmethod
    def codes(scan: CodeScanResult) -> str:
        if not scan.total:
            return NO_CODES_MESSAGE
        lines = [
            "Found the following codes in the text:",
            f"ICD-10: {', '.join(scan.icd10) or 'None'}",
            f"CPT: {', '.join(scan.cpt) or 'None'}",
        ]
        if scan.snomed:
            lines.append(f"SNOMED CT: {', '.join(scan.snomed)}")
        lines.append("Would you like me to generate a full note with these?")
        return "\n".join(lines)

    @staticmethod
    def copy_text(payload: Optional[InsertionPayload]) -> str:
        """Clipboard text for the last generated result; empty when there is none."""
        if payload is None:
            return ""
        out = ""
        if payload.soap is not None:
            out += "SOAP NOTE:\n\n"
            out += f"S: {payload.soap.subjective}\n\n"
            out += f"O: {payload.soap.objective}\n\n"
            out += f"A: {payload.soap.assessment}\n\n"
            out += f"P: {payload.soap.plan}\n\n"
        if payload.icd_codes:
            out += "\nICD-10 CODES:\n"
            out += "".join(f"• {c.code} - {c.description}\n" for c in payload.icd_codes)
            out += "\n"
        if payload.cpt_codes:
            out += "CPT CODES:\n"
            out += "".join(f"• {c.code} - {c.description}\n" for c in payload.cpt_codes)
        return out
