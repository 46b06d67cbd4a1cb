"""Heuristic field/table discovery and idempotent insertion."""

from __future__ import annotations

from emr_copilot.insertion.engine import InsertionEngine
from emr_copilot.insertion.fields import SOAP_FIELD_CANDIDATES, insert_soap
from emr_copilot.insertion.tables import find_billing_table, insert_codes, normalize

__all__ = [
    "SOAP_FIELD_CANDIDATES",
    "InsertionEngine",
    "find_billing_table",
    "insert_codes",
    "insert_soap",
    "normalize",
]
