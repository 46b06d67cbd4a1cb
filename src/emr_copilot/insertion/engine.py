"""Idempotent write-back of SOAP notes and billing codes into a page."""

from __future__ import annotations

import logging

from emr_copilot.exceptions import InsertionNotFoundError
from emr_copilot.extraction.document import PageDocument
from emr_copilot.insertion.fields import insert_soap
from emr_copilot.insertion.tables import find_billing_table, insert_codes
from emr_copilot.models import InsertionOutcome, InsertionPayload

log = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Could not find matching fields on this page"


class InsertionEngine:
    """Writes an :class:`InsertionPayload` into one document.

    ``insert`` never raises. It succeeds when a SOAP field was written or the
    billing grid was located and every code is now present in it (including
    the case where all of them already were).
    """

    def insert(self, doc: PageDocument, payload: InsertionPayload) -> InsertionOutcome:
        try:
            return self._insert(doc, payload)
        except InsertionNotFoundError as exc:
            return InsertionOutcome(success=False, error=str(exc))
        except Exception as exc:
            log.exception("Insertion failed for %s", doc.url or "<page>")
            return InsertionOutcome(success=False, error=str(exc))

    def _insert(self, doc: PageDocument, payload: InsertionPayload) -> InsertionOutcome:
        if payload.is_empty():
            raise InsertionNotFoundError("Nothing to insert")

        fields_written: list[str] = []
        if payload.soap is not None:
            fields_written = insert_soap(doc, payload.soap)

        table_found = False
        rows_added = rows_skipped = 0
        if payload.codes:
            table = find_billing_table(doc)
            if table is None:
                log.info("No billing table found on %s", doc.url or "<page>")
            else:
                table_found = True
                rows_added, rows_skipped = insert_codes(doc, table, payload.codes)

        if not fields_written and not table_found:
            raise InsertionNotFoundError(NOT_FOUND_MESSAGE)

        return InsertionOutcome(
            success=True,
            fields_written=fields_written,
            rows_added=rows_added,
            rows_skipped=rows_skipped,
        )
