"""Tests for SOAP field filling and idempotent billing-row insertion."""

from __future__ import annotations

import pytest

from emr_copilot.extraction.document import PageDocument
from emr_copilot.insertion.engine import NOT_FOUND_MESSAGE, InsertionEngine
from emr_copilot.insertion.fields import find_soap_field, insert_soap
from emr_copilot.insertion.tables import (
    build_code_row,
    existing_codes,
    find_billing_table,
    insert_codes,
    normalize,
    table_after_heading,
    table_with_grid_shape,
    table_with_header_words,
)
from emr_copilot.models import Code, CodeType, InsertionPayload, SoapResult

SOAP = SoapResult(
    subjective="Cough for 3 weeks",
    objective="Lungs clear",
    assessment="Viral bronchitis",
    plan="Supportive care",
)

HEADER_CELLS = "".join(
    f"<td>{c}</td>"
    for c in (
        "Type", "Code", "Description", "Modifiers", "Price",
        "Qty", "Justify", "Note Codes", "Auth", "Delete",
    )
)


def _icd(code: str, desc: str = "") -> Code:
    return Code(code=code, description=desc, type=CodeType.ICD10)


def _cpt(code: str, price: float | None = None) -> Code:
    return Code(code=code, description="Office visit", type=CodeType.CPT4, price=price)


def _row_codes(table) -> list[tuple[str, str]]:
    rows = []
    for tr in table.find_all("tr"):
        cells = tr.find_all(["td", "th"], recursive=False)
        rows.append((cells[0].get_text(strip=True), cells[1].get_text(strip=True)))
    return rows


# ── Table discovery ──────────────────────────────────────────────────


class TestTableDiscovery:
    def test_heading_tier_skips_decoy_table(self, fee_sheet_page) -> None:
        table = table_after_heading(fee_sheet_page)
        assert table is not None
        assert table.get("id") == "billing"

    def test_heading_in_wrapper_uses_parents_sibling(self) -> None:
        doc = PageDocument(
            "<section><h4>Current Encounter</h4></section>"
            f"<span>spacer</span><table id='grid'><tr>{HEADER_CELLS}</tr></table>"
        )
        assert table_after_heading(doc).get("id") == "grid"

    def test_header_words_tier(self) -> None:
        doc = PageDocument(
            "<table id='other'><tr><td>Name</td></tr></table>"
            "<table id='grid'><tr><th>Type</th><th>Code</th><th>Description</th></tr></table>"
        )
        assert table_after_heading(doc) is None
        assert table_with_header_words(doc).get("id") == "grid"

    def test_grid_shape_tier(self) -> None:
        cells = "".join(f"<td>{c}</td>" for c in ("Type", "Code", "Desc", "Mod", "$", "#", "J", "N", "A", "X"))
        doc = PageDocument(f"<table id='grid'><tr>{cells}</tr></table>")
        assert table_with_header_words(doc) is None
        assert table_with_grid_shape(doc).get("id") == "grid"

    def test_narrow_table_is_not_a_grid(self) -> None:
        doc = PageDocument("<table><tr><td>Type</td><td>Code</td></tr></table>")
        assert find_billing_table(doc) is None


# ── Row construction ─────────────────────────────────────────────────


class TestBuildCodeRow:
    def test_cpt_row(self, fee_sheet_page) -> None:
        row = build_code_row(fee_sheet_page, _cpt("99213", price=100))
        cells = row.find_all("td", recursive=False)
        assert len(cells) == 10
        assert row["data-extension-inserted"] == "true"
        assert row["data-code"] == "99213"
        assert row["data-type"] == "CPT4"
        assert cells[0].get_text() == "CPT4"
        assert cells[1].get_text() == "99213"
        assert row.find("input", attrs={"name": "price[]"})["value"] == "100.00"
        assert row.find("input", attrs={"name": "qty[]"})["value"] == "1"

    def test_icd_row_has_no_price_or_quantity(self, fee_sheet_page) -> None:
        row = build_code_row(fee_sheet_page, _icd("I10", "Essential hypertension"))
        assert row.find("input", attrs={"name": "price[]"})["value"] == ""
        assert row.find("input", attrs={"name": "qty[]"})["value"] == ""
        assert row.find_all("td")[2].get_text() == "Essential hypertension"

    def test_cpt_without_price(self, fee_sheet_page) -> None:
        row = build_code_row(fee_sheet_page, _cpt("99213"))
        assert row.find("input", attrs={"name": "price[]"})["value"] == "0.00"

    def test_description_defaults_to_code(self, fee_sheet_page) -> None:
        row = build_code_row(fee_sheet_page, _icd("R05.9"))
        assert row.find_all("td")[2].get_text() == "R05.9"


# ── Row insertion ────────────────────────────────────────────────────


class TestInsertCodes:
    def test_normalize(self) -> None:
        assert normalize(" e11.9 ") == "E11.9"
        assert normalize("I 10\n") == "I10"

    def test_existing_codes_are_normalized(self, fee_sheet_page) -> None:
        table = find_billing_table(fee_sheet_page)
        assert ("ICD10", "E11.9") in existing_codes(table)

    def test_all_codes_present_adds_nothing(self, fee_sheet_page) -> None:
        table = find_billing_table(fee_sheet_page)
        before = len(table.find_all("tr"))
        added, skipped = insert_codes(fee_sheet_page, table, [_icd("E11.9")])
        assert (added, skipped) == (0, 1)
        assert len(table.find_all("tr")) == before
        assert fee_sheet_page.events == []

    def test_new_rows_follow_header(self, fee_sheet_page) -> None:
        table = find_billing_table(fee_sheet_page)
        added, skipped = insert_codes(fee_sheet_page, table, [_icd("I10"), _cpt("99213", 100)])
        assert (added, skipped) == (2, 0)
        assert _row_codes(table) == [
            ("Type", "Code"),
            ("ICD10", "I10"),
            ("CPT4", "99213"),
            ("ICD10", "e11.9"),
        ]

    def test_second_insert_is_idempotent(self, fee_sheet_page) -> None:
        table = find_billing_table(fee_sheet_page)
        codes = [_icd("I10"), _cpt("99213", 100)]
        insert_codes(fee_sheet_page, table, codes)
        rows_after_first = len(table.find_all("tr"))
        assert insert_codes(fee_sheet_page, table, codes) == (0, 2)
        assert len(table.find_all("tr")) == rows_after_first

    def test_duplicates_within_payload_count_once(self, fee_sheet_page) -> None:
        table = find_billing_table(fee_sheet_page)
        assert insert_codes(fee_sheet_page, table, [_icd("I10"), _icd("i10")]) == (1, 1)

    def test_same_code_different_type_is_distinct(self, fee_sheet_page) -> None:
        table = find_billing_table(fee_sheet_page)
        added, _ = insert_codes(
            fee_sheet_page, table, [Code(code="E11.9", type=CodeType.CPT4)]
        )
        assert added == 1

    def test_header_row_promoted_to_top(self) -> None:
        doc = PageDocument(
            "<table id='grid'>"
            "<tr><td>ICD10</td><td>I10</td></tr>"
            f"<tr>{HEADER_CELLS}</tr>"
            "</table>"
        )
        table = find_billing_table(doc)
        insert_codes(doc, table, [_icd("R05.9")])
        assert _row_codes(table) == [("Type", "Code"), ("ICD10", "R05.9"), ("ICD10", "I10")]

    def test_header_in_thead_puts_rows_at_top_of_tbody(self) -> None:
        header = HEADER_CELLS.replace("td>", "th>")
        doc = PageDocument(
            f"<table><thead><tr>{header}</tr></thead>"
            "<tbody><tr><td>ICD10</td><td>I10</td></tr></tbody></table>"
        )
        table = find_billing_table(doc)
        added, _ = insert_codes(doc, table, [_icd("R05.9"), _cpt("99213")])
        assert added == 2
        assert _row_codes(table) == [
            ("Type", "Code"), ("ICD10", "R05.9"), ("CPT4", "99213"), ("ICD10", "I10"),
        ]
        assert len(table.thead.find_all("tr")) == 1
        assert table.tbody.find("tr")["data-code"] == "R05.9"

    def test_thead_without_tbody_gets_one(self) -> None:
        doc = PageDocument(f"<table><thead><tr>{HEADER_CELLS}</tr></thead></table>")
        table = find_billing_table(doc)
        insert_codes(doc, table, [_icd("R05.9")])
        assert table.thead.find_next_sibling("tbody").find("tr")["data-code"] == "R05.9"

    def test_rows_appended_when_no_header(self) -> None:
        cells = "".join(f"<td>{c}</td>" for c in ("ICD10", "I10", "code", "", "", "", "", "", "", ""))
        doc = PageDocument(f"<table><tbody><tr>{cells}</tr></tbody></table>")
        table = find_billing_table(doc)
        insert_codes(doc, table, [_icd("R05.9")])
        assert _row_codes(table)[-1] == ("ICD10", "R05.9")
        assert table.tbody.find_all("tr")[-1]["data-code"] == "R05.9"

    def test_fee_inputs_notified(self, fee_sheet_page) -> None:
        table = find_billing_table(fee_sheet_page)
        insert_codes(fee_sheet_page, table, [_icd("I10")])
        fee_events = [e.type for e in fee_sheet_page.events if e.name == "fee[]"]
        assert fee_events == ["change", "input"]


# ── SOAP fields ──────────────────────────────────────────────────────


class TestSoapFields:
    def test_exact_and_named_candidates(self, soap_form_page) -> None:
        assert find_soap_field(soap_form_page, "subjective").get("id") == "subjective"
        assert find_soap_field(soap_form_page, "objective").get("name") == "soap_objective"
        assert find_soap_field(soap_form_page, "assessment").get("id") == "a_text"
        assert find_soap_field(soap_form_page, "plan").name == "input"

    def test_partial_name(self) -> None:
        doc = PageDocument('<textarea name="form_assessment_text"></textarea>')
        assert find_soap_field(doc, "assessment").get("name") == "form_assessment_text"

    def test_label_fallback(self) -> None:
        doc = PageDocument('<div><label>Plan of care</label><textarea name="notes_4"></textarea></div>')
        assert find_soap_field(doc, "plan").get("name") == "notes_4"

    def test_insert_writes_all_sections(self, soap_form_page) -> None:
        written = insert_soap(soap_form_page, SOAP)
        assert written == ["subjective", "objective", "assessment", "plan"]
        assert soap_form_page.select_one("#subjective").get_text() == "Cough for 3 weeks"
        assert soap_form_page.select_one('input[name="plan"]')["value"] == "Supportive care"

    def test_each_write_emits_input_and_change(self, soap_form_page) -> None:
        insert_soap(soap_form_page, SOAP)
        assert [e.type for e in soap_form_page.events] == ["input", "change"] * 4
        assert all(e.bubbles for e in soap_form_page.events)

    def test_missing_fields_skipped(self) -> None:
        doc = PageDocument('<textarea id="subjective"></textarea>')
        assert insert_soap(doc, SOAP) == ["subjective"]


# ── Engine ───────────────────────────────────────────────────────────


class TestInsertionEngine:
    @pytest.fixture
    def engine(self) -> InsertionEngine:
        return InsertionEngine()

    def test_codes_into_fee_sheet(self, engine, fee_sheet_page) -> None:
        payload = InsertionPayload.model_validate(
            {"icdCodes": [{"code": "I10", "desc": "Hypertension"}], "cptCodes": [{"code": "99213"}]}
        )
        outcome = engine.insert(fee_sheet_page, payload)
        assert outcome.success
        assert outcome.rows_added == 2

    def test_all_present_still_succeeds(self, engine, fee_sheet_page) -> None:
        payload = InsertionPayload(icd_codes=[_icd("E11.9")])
        outcome = engine.insert(fee_sheet_page, payload)
        assert outcome.success
        assert outcome.rows_added == 0
        assert outcome.rows_skipped == 1

    def test_soap_into_form(self, engine, soap_form_page) -> None:
        outcome = engine.insert(soap_form_page, InsertionPayload(soap=SOAP))
        assert outcome.success
        assert len(outcome.fields_written) == 4

    def test_nothing_matches(self, engine) -> None:
        doc = PageDocument("<p>Calendar</p>")
        outcome = engine.insert(doc, InsertionPayload(soap=SOAP, icd_codes=[_icd("I10")]))
        assert not outcome.success
        assert outcome.error == NOT_FOUND_MESSAGE

    def test_empty_payload(self, engine, fee_sheet_page) -> None:
        outcome = engine.insert(fee_sheet_page, InsertionPayload())
        assert not outcome.success
        assert outcome.error == "Nothing to insert"
