"""Fee slip / superbill prompt.

Sampling for this prompt runs at minimum temperature; the instruction to stay
consistent and the cache together keep codes stable per encounter.
"""

from __future__ import annotations

_PROMPT_DATA: dict[str, str] = {
    "FEE_SLIP_PROMPT": """You are an expert medical biller. Based on the clinical content below, \
generate a "Fee Slip" or Superbill.

CRITICAL: You must be CONSISTENT. For the same patient encounter and symptoms, always return \
the SAME billing codes.

EXTRACT:
1. Patient Name
2. Diagnoses (with ICD-10 codes - use the most specific codes based on the chief complaint)
3. Services Rendered (with CPT codes - use standard E/M codes based on complexity)
4. Estimated Charges (assign standard Medicare rates: Level 3 visit ~$100, Level 4 ~$150, etc.)

RETURN JSON ONLY:
{{
    "patientName": "...",
    "diagnoses": ["Dx 1", "Dx 2"],
    "services": ["Service 1 (CPT)"],
    "billing": {{
        "icd": [{{"code": "...", "desc": "..."}}],
        "cpt": [{{"code": "...", "desc": "...", "price": 100}}]
    }},
    "total": 100
}}

Clinical content:
{corpus}

Output only the JSON:""",
}
