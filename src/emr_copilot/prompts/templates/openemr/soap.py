"""SOAP-note drafting prompt."""

from __future__ import annotations

_PROMPT_DATA: dict[str, str] = {
    "SOAP_PROMPT": """You are an expert clinical scribe. Generate a SOAP note from the clinical data below.

REQUIREMENTS:
- **SUBJECTIVE**: Patient's chief complaint and symptoms (be specific)
- **OBJECTIVE**: Vital signs and exam findings
- **ASSESSMENT**: Clinical impression and diagnoses
- **PLAN**: Treatment, medications, follow-up

Keep each section under 100 words. Be concise but complete.

Return ONLY this JSON format (no markdown, no extra text):
{{
    "soap_content": {{
        "subjective": "...",
        "objective": "...",
        "assessment": "...",
        "plan": "..."
    }}
}}

Clinical data:
{corpus}

JSON output:""",
}
