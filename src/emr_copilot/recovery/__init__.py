"""Structured-response recovery."""

from __future__ import annotations

from emr_copilot.recovery.parser import (
    parse_fee_slip,
    parse_soap,
    parse_structured,
    sanitize_control_chars,
    strip_fences,
)

__all__ = [
    "parse_fee_slip",
    "parse_soap",
    "parse_structured",
    "sanitize_control_chars",
    "strip_fences",
]
