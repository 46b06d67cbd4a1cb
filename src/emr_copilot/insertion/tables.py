"""Billing-grid discovery and duplicate-free code row insertion.

Table discovery is an ordered list of strategies, each a function
``(PageDocument) -> Tag | None``; the first table found wins.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Iterable, Optional

from bs4 import Tag

from emr_copilot.extraction.document import PageDocument, text_of
from emr_copilot.models import Code, CodeType

log = logging.getLogger(__name__)

TableStrategy = Callable[[PageDocument], Optional[Tag]]

HEADING_PHRASES = (
    "Selected Fee Sheet Codes",
    "Fee Sheet Codes and Charges",
    "Current Encounter",
)
HEADING_TAGS = ["h2", "h3", "h4", "div", "span"]
MAX_SIBLING_HOPS = 10
GRID_CELL_RANGE = (8, 12)

# Type | Code | Description | Modifiers | Price | Qty | Justify | Note Codes | Auth | Delete
ROW_CELLS = 10

_WHITESPACE = re.compile(r"\s+")


def normalize(value: str) -> str:
    """Strip all whitespace and upper-case."""
    return _WHITESPACE.sub("", value or "").upper()


def _rows(element: Tag) -> list[Tag]:
    return element.find_all("tr")


def _cells(row: Tag) -> list[Tag]:
    return row.find_all(["td", "th"], recursive=False)


def _cell_text(cell: Tag) -> str:
    text = text_of(cell, " ")
    if text:
        return text
    field = cell.find(["input", "select"])
    return str(field.get("value", "")) if field is not None else ""


def _has_header_words(text: str) -> bool:
    lowered = text.lower()
    return "type" in lowered and "code" in lowered and "description" in lowered


# ── Discovery strategies ─────────────────────────────────────────────


def _table_in(element: Tag) -> Optional[Tag]:
    if element.name == "table":
        return element
    return element.find("table")


def _walk_siblings(start: Optional[Tag]) -> Optional[Tag]:
    hops = 0
    node = start
    while node is not None and hops < MAX_SIBLING_HOPS:
        table = _table_in(node)
        if table is not None:
            return table
        node = node.find_next_sibling()
        hops += 1
    return None


def table_after_heading(doc: PageDocument) -> Optional[Tag]:
    """Table following a fee-sheet heading, within a bounded sibling walk."""
    for phrase in HEADING_PHRASES:
        for heading in doc.soup.find_all(HEADING_TAGS):
            # a container that already holds the grid is not a heading
            if heading.find("table") is not None:
                continue
            if phrase.lower() not in text_of(heading, " ").lower():
                continue
            table = _walk_siblings(heading.find_next_sibling())
            if table is None and isinstance(heading.parent, Tag):
                table = _walk_siblings(heading.parent.find_next_sibling())
            if table is not None:
                return table
    return None


def table_with_header_words(doc: PageDocument) -> Optional[Tag]:
    for table in doc.select("table"):
        if _has_header_words(text_of(table, " ")):
            return table
    return None


def table_with_grid_shape(doc: PageDocument) -> Optional[Tag]:
    """Structural fallback: a first row as wide as the billing grid."""
    lo, hi = GRID_CELL_RANGE
    for table in doc.select("table"):
        rows = _rows(table)
        if not rows or not lo <= len(_cells(rows[0])) <= hi:
            continue
        text = text_of(table, " ").lower()
        if "type" in text or "code" in text:
            return table
    return None


TABLE_STRATEGIES: tuple[TableStrategy, ...] = (
    table_after_heading,
    table_with_header_words,
    table_with_grid_shape,
)


def find_billing_table(
    doc: PageDocument,
    strategies: tuple[TableStrategy, ...] = TABLE_STRATEGIES,
) -> Optional[Tag]:
    for strategy in strategies:
        table = strategy(doc)
        if table is not None:
            log.debug("Billing table located by %s", strategy.__name__)
            return table
    return None


# ── Row construction ─────────────────────────────────────────────────


def _price_text(code: Code) -> str:
    if code.price is not None:
        return f"{code.price:.2f}"
    return "" if code.type is CodeType.ICD10 else "0.00"


def build_code_row(doc: PageDocument, code: Code) -> Tag:
    """A fee-sheet row with the grid's ten cells, marked as inserted."""
    code_type = code.type.value
    is_icd = code.type is CodeType.ICD10
    row = doc.new_tag(
        "tr",
        **{"data-extension-inserted": "true", "data-code": code.code, "data-type": code_type},
    )

    def _cell(*children: Tag, text: Optional[str] = None) -> None:
        td = doc.new_tag("td")
        if text is not None:
            td.string = text
        for child in children:
            td.append(child)
        row.append(td)

    _cell(text=code_type)
    _cell(text=code.code)
    _cell(text=code.description or code.code)
    _cell(doc.new_tag("input", type="text", value=""))
    _cell(doc.new_tag("input", type="text", name="price[]", value=_price_text(code)))
    _cell(doc.new_tag("input", type="text", name="qty[]", value="" if is_icd else "1"))
    justify = doc.new_tag("select", name="justify[]")
    justify.append(doc.new_tag("option", value=""))
    _cell(justify)
    _cell(doc.new_tag("input", type="text", value=""))
    _cell(doc.new_tag("input", type="checkbox", name="auth[]"))
    _cell(doc.new_tag("input", type="checkbox", name="delete[]"))
    return row


# ── Insertion ────────────────────────────────────────────────────────


def existing_codes(table: Tag) -> set[tuple[str, str]]:
    """Normalized ``(type, code)`` pairs already present in any table row."""
    present: set[tuple[str, str]] = set()
    for row in _rows(table):
        cells = _cells(row)
        if len(cells) >= 2:
            present.add((normalize(_cell_text(cells[0])), normalize(_cell_text(cells[1]))))
    return present


def find_header_row(container: Tag) -> Optional[Tag]:
    for row in _rows(container):
        if _has_header_words(text_of(row, " ")):
            return row
    return None


def promote_header(header: Tag) -> None:
    """Move *header* to the first row position of its container."""
    parent = header.parent
    if parent is None:
        return
    first_row = parent.find("tr", recursive=False)
    if first_row is not None and first_row is not header:
        first_row.insert_before(header.extract())


def _in_thead(row: Tag) -> bool:
    return row.parent is not None and row.parent.name == "thead"


def _place_rows(doc: PageDocument, table: Tag, header: Optional[Tag], rows: list[Tag]) -> None:
    """New rows go right under the header, or at the end when there is none.

    A header inside ``<thead>`` puts them at the top of ``<tbody>``.
    """
    if header is None:
        container = table.find("tbody") or table
        for row in rows:
            container.append(row)
        return
    if not _in_thead(header):
        anchor = header
        for row in rows:
            anchor.insert_after(row)
            anchor = row
        return
    body = table.find("tbody")
    if body is None:
        body = doc.new_tag("tbody")
        header.parent.insert_after(body)
    first_row = body.find("tr", recursive=False)
    for row in rows:
        if first_row is not None:
            first_row.insert_before(row)
        else:
            body.append(row)


def insert_codes(doc: PageDocument, table: Tag, codes: Iterable[Code]) -> tuple[int, int]:
    """Insert rows for codes not already in *table*.

    Returns:
        ``(rows_added, rows_skipped)``. Codes repeated in *codes* count once.
    """
    header = find_header_row(table)
    if header is not None and not _in_thead(header):
        promote_header(header)

    present = existing_codes(table)
    new_rows: list[Tag] = []
    skipped = 0
    for code in codes:
        key = (normalize(code.type.value), normalize(code.code))
        if key in present:
            skipped += 1
            continue
        present.add(key)
        new_rows.append(build_code_row(doc, code))

    if not new_rows:
        return 0, skipped

    _place_rows(doc, table, header, new_rows)

    for fee_input in doc.select('input[name="fee[]"]'):
        doc.dispatch(fee_input, "change")
        doc.dispatch(fee_input, "input")

    log.info("Inserted %d code rows (%d already present)", len(new_rows), skipped)
    return len(new_rows), skipped
