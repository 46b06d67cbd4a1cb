"""Tests for plain-text rendering, copy text and navigation links."""

from __future__ import annotations

from emr_copilot.formatters.text_formatter import (
    CACHED_NOTICE,
    NO_CODES_MESSAGE,
    TextFormatter,
    interface_base_url,
)
from emr_copilot.models import (
    Billing,
    Code,
    CodeScanResult,
    CodeType,
    CptEntry,
    FeeSlipResult,
    IcdEntry,
    InsertionPayload,
    PageMetadata,
    SoapResult,
)
from tests.conftest import ENCOUNTER_URL

BASE = "https://emr.example.org/openemr/interface"

FEE_SLIP = FeeSlipResult(
    patient_name="Jane Roe",
    diagnoses=["Essential hypertension"],
    services=["Office visit"],
    billing=Billing(
        icd=[IcdEntry(code="I10", desc="Essential hypertension")],
        cpt=[CptEntry(code="99213", desc="Office visit", price=100)],
    ),
    total=100,
)


class TestLinks:
    def test_interface_base_url(self) -> None:
        assert interface_base_url(ENCOUNTER_URL) == BASE
        assert interface_base_url("not a url") == ""

    def test_navigation_links(self) -> None:
        metadata = PageMetadata(patient_id="7", encounter_id="42", source_url=ENCOUNTER_URL)
        links = TextFormatter.navigation_links(metadata)
        assert links["soap"] == (
            f"{BASE}/patient_file/encounter/load_form.php?formname=soap&pid=7&encounter=42"
        )
        assert links["fee_sheet"].endswith("formname=fee_sheet&pid=7&encounter=42")
        assert links["vitals"].endswith("formname=vitals&pid=7&encounter=42")
        assert links["demographics"] == f"{BASE}/patient_file/summary/demographics.php?pid=7"

    def test_no_links_without_patient(self) -> None:
        assert TextFormatter.navigation_links(PageMetadata(source_url=ENCOUNTER_URL)) == {}


class TestFooter:
    def test_footer_with_ids(self) -> None:
        metadata = PageMetadata(patient_id="7", encounter_id="42", source_url=ENCOUNTER_URL)
        footer = TextFormatter().footer(metadata)
        assert footer.splitlines() == [
            "Source (Encounter): /openemr/interface/patient_file/encounter/encounter_top.php",
            "Patient ID: 7 • Encounter: 42",
        ]

    def test_footer_without_source(self) -> None:
        assert TextFormatter().footer(PageMetadata()) == "Source (OpenEMR): No source available"


class TestResults:
    def test_soap(self) -> None:
        text = TextFormatter.soap(SoapResult(subjective="s", objective="o", assessment="a", plan="p"))
        assert "S: s\n\nO: o\n\nA: a\n\nP: p" in text

    def test_fee_slip(self) -> None:
        text = TextFormatter.fee_slip(FEE_SLIP)
        assert text.startswith("Fee Slip for Jane Roe")
        assert "ICD-10 I10: Essential hypertension" in text
        assert "CPT 99213: Office visit" in text
        assert "Total: $100.00" in text
        assert CACHED_NOTICE not in text

    def test_cached_fee_slip_is_marked(self) -> None:
        assert CACHED_NOTICE in TextFormatter.fee_slip(FEE_SLIP, cached=True)

    def test_codes(self) -> None:
        text = TextFormatter.codes(CodeScanResult(icd10=["I10", "E11.9"], snomed=["38341003"]))
        assert "ICD-10: I10, E11.9" in text
        assert "CPT: None" in text
        assert "SNOMED CT: 38341003" in text

    def test_no_codes(self) -> None:
        assert TextFormatter.codes(CodeScanResult()) == NO_CODES_MESSAGE


class TestCopyText:
    def test_nothing_generated(self) -> None:
        assert TextFormatter.copy_text(None) == ""

    def test_soap_and_codes(self) -> None:
        payload = InsertionPayload(
            soap=SoapResult(subjective="s", objective="o", assessment="a", plan="p"),
            icd_codes=[Code(code="I10", description="Hypertension", type=CodeType.ICD10)],
            cpt_codes=[Code(code="99213", description="Office visit", type=CodeType.CPT4)],
        )
        text = TextFormatter.copy_text(payload)
        assert text.startswith("SOAP NOTE:\n\nS: s")
        assert "ICD-10 CODES:\n• I10 - Hypertension\n" in text
        assert "CPT CODES:\n• 99213 - Office visit\n" in text
