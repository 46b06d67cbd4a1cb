"""Recover validated structured results from raw endpoint text.

Pipeline per response:

1. strip a leading ```` ```json ```` / ```` ``` ```` fence and a trailing one
2. reject truncated output, and for SOAP notes, structurally incomplete output
3. ``json.loads``; on failure escape control characters inside string
   literals and re-parse exactly once
4. validate against the pydantic schema
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError

from emr_copilot.exceptions import (
    MalformedResponseError,
    SchemaValidationError,
    TruncatedResponseError,
)
from emr_copilot.models import FeeSlipResult, SoapResult

log = logging.getLogger(__name__)

PREVIEW_CHARS = 200

_CONTROL_ESCAPES = {"\n": "\\n", "\r": "\\r", "\t": "\\t"}


# ── Cleanup ──────────────────────────────────────────────────────────


def strip_fences(raw: str) -> str:
    """Remove a leading code fence (with optional ``json`` tag) and a trailing fence."""
    text = raw.strip()
    for opener in ("```json", "```"):
        if text.startswith(opener):
            text = text[len(opener) :]
            if text.startswith("\r\n"):
                text = text[2:]
            elif text.startswith("\n"):
                text = text[1:]
            break
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()


def sanitize_control_chars(text: str) -> str:
    """Escape raw control characters that sit inside JSON string literals.

    Newlines between tokens are valid JSON and are left alone. A control
    character directly after a backslash is treated as already escaped.
    """
    out: list[str] = []
    in_string = False
    escape = False
    for ch in text:
        if in_string and ch < " ":
            replacement = _CONTROL_ESCAPES.get(ch, f"\\u{ord(ch):04x}")
            # "\<newline>" becomes "\n": keep the pending backslash, emit the letter
            out.append(replacement[1:] if escape else replacement)
            escape = False
            continue
        out.append(ch)
        if escape:
            escape = False
        elif ch == "\\":
            escape = in_string
        elif ch == '"':
            in_string = not in_string
    return "".join(out)


# ── Structural checks ────────────────────────────────────────────────


def check_truncation(text: str, stop_reason: str) -> None:
    if stop_reason == "max_tokens":
        raise TruncatedResponseError("response truncated", raw_response=text)


def _unescaped_quotes(text: str) -> int:
    count = 0
    escape = False
    for ch in text:
        if escape:
            escape = False
        elif ch == "\\":
            escape = True
        elif ch == '"':
            count += 1
    return count


def check_structure(text: str) -> None:
    """Reject output that cannot be a complete JSON object."""
    if not text.endswith("}"):
        log.error("Structured response does not end with a closing brace: %r", text[-100:])
        raise MalformedResponseError("incomplete response", raw_response=text)

    opened = text.count("{")
    closed = text.count("}")
    if opened != closed:
        raise MalformedResponseError(
            f"mismatched braces (open={opened}, close={closed})", raw_response=text
        )

    if _unescaped_quotes(text) % 2:
        raise MalformedResponseError("unclosed string", raw_response=text)


# ── Parsing ──────────────────────────────────────────────────────────


def parse_structured(raw: str, stop_reason: str = "end_turn", *, strict: bool = False) -> Any:
    """Parse endpoint text into a JSON value.

    Raises:
        TruncatedResponseError: ``stop_reason`` reports the output limit.
        MalformedResponseError: Structural check failed or the text does not
            parse even after one sanitization pass.
    """
    text = strip_fences(raw)
    check_truncation(text, stop_reason)
    if strict:
        check_structure(text)

    try:
        return json.loads(text)
    except json.JSONDecodeError as first_error:
        log.warning("Initial parse failed (%s), sanitizing control characters", first_error)

    try:
        return json.loads(sanitize_control_chars(text))
    except json.JSONDecodeError as exc:
        log.error(
            "Failed to parse structured response",
            extra={"response_length": len(text), "response_preview": text[:PREVIEW_CHARS]},
        )
        raise MalformedResponseError(
            f"invalid structured response: {text[:PREVIEW_CHARS]}", raw_response=raw
        ) from exc


def parse_soap(raw: str, stop_reason: str = "end_turn") -> SoapResult:
    """Parse a ``{"soap_content": {...}}`` response into a :class:`SoapResult`."""
    data = parse_structured(raw, stop_reason, strict=True)
    content = data.get("soap_content") if isinstance(data, dict) else None
    if not isinstance(content, dict):
        raise SchemaValidationError("response is missing required SOAP sections", raw_response=raw)
    try:
        return SoapResult.model_validate(content)
    except ValidationError as exc:
        missing = sorted({str(err["loc"][0]) for err in exc.errors() if err["loc"]})
        raise SchemaValidationError(
            f"response is missing required SOAP sections: {', '.join(missing)}",
            raw_response=raw,
        ) from exc


def parse_fee_slip(raw: str, stop_reason: str = "end_turn") -> FeeSlipResult:
    """Parse a superbill response; ``billing.icd`` and ``billing.cpt`` are required."""
    data = parse_structured(raw, stop_reason)
    if not isinstance(data, dict):
        raise SchemaValidationError("fee slip response is not an object", raw_response=raw)
    try:
        return FeeSlipResult.model_validate(data)
    except ValidationError as exc:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in exc.errors()})
        raise SchemaValidationError(
            f"fee slip response failed validation: {', '.join(fields)}", raw_response=raw
        ) from exc
