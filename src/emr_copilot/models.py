"""Pydantic data models for emr-copilot.

Wire aliases (``pid``, ``patientName``, ``icdCodes`` ...) match the JSON the
generation endpoint returns and the payloads exchanged with page frames.
Python code uses the snake_case field names.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

# ── Enums ────────────────────────────────────────────────────────────


class Intent(str, Enum):
    """Classified purpose of a user request."""

    CHAT = "chat"
    SOAP = "soap"
    FEE_SLIP = "fee_slip"
    CODE_EXTRACTION = "code_extraction"


class CodeType(str, Enum):
    """Coding systems the fee sheet accepts."""

    ICD10 = "ICD10"
    CPT4 = "CPT4"


# ── Extraction models ────────────────────────────────────────────────


class PageMetadata(BaseModel):
    """Identifiers resolved from a page URL or its hidden inputs."""

    model_config = ConfigDict(populate_by_name=True)

    patient_id: Optional[str] = Field(default=None, alias="pid")
    encounter_id: Optional[str] = Field(default=None, alias="encounter")
    source_url: str = Field(default="", alias="url")


class ExtractionResult(BaseModel):
    """Bounded corpus plus identifying metadata for one page."""

    text: str = ""
    metadata: PageMetadata = Field(default_factory=PageMetadata)


class FrameFragment(ExtractionResult):
    """Extraction result of a single frame, before aggregation."""

    is_top_level: bool = False


# ── Generation models ────────────────────────────────────────────────


class GenerationRequest(BaseModel):
    """A single prompt ready to send to the endpoint.

    ``temperature=None`` leaves sampling at the endpoint default.
    """

    intent: Intent
    prompt: str
    temperature: Optional[float] = None
    max_tokens: int = 1024


class GenerationResponse(BaseModel):
    """Raw endpoint text with its normalized stop reason."""

    text: str
    stop_reason: str = "end_turn"
    usage: dict[str, int] = Field(default_factory=dict)

    @property
    def truncated(self) -> bool:
        return self.stop_reason == "max_tokens"


# ── Structured results ───────────────────────────────────────────────


class SoapResult(BaseModel):
    """Four-section clinical note. Every section must be non-empty."""

    model_config = ConfigDict(str_strip_whitespace=True)

    subjective: str = Field(..., min_length=1)
    objective: str = Field(..., min_length=1)
    assessment: str = Field(..., min_length=1)
    plan: str = Field(..., min_length=1)


class IcdEntry(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    code: str
    desc: str = ""


class CptEntry(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    code: str
    desc: str = ""
    price: Optional[float] = None


class Billing(BaseModel):
    """Both lists are required; either may be empty."""

    icd: list[IcdEntry]
    cpt: list[CptEntry]


class FeeSlipResult(BaseModel):
    """Superbill returned by the endpoint for one encounter."""

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    patient_name: str = Field(default="", alias="patientName")
    diagnoses: list[str] = Field(default_factory=list)
    services: list[str] = Field(default_factory=list)
    billing: Billing
    total: Optional[float] = None

    def to_codes(self) -> tuple[list[Code], list[Code]]:
        """Convert billing entries into insertable ICD-10 and CPT-4 codes."""
        icd = [Code(code=i.code, description=i.desc, type=CodeType.ICD10) for i in self.billing.icd]
        cpt = [
            Code(code=c.code, description=c.desc, type=CodeType.CPT4, price=c.price)
            for c in self.billing.cpt
        ]
        return icd, cpt


class Code(BaseModel):
    """A billing code as inserted into the fee sheet grid."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    code: str
    description: str = Field(
        default="",
        validation_alias=AliasChoices("description", "desc", "fullDescription", "shortDescription"),
    )
    type: CodeType = Field(validation_alias=AliasChoices("type", "codeType"))
    price: Optional[float] = None


class CodeScanResult(BaseModel):
    """Codes found verbatim in a corpus by regex scan."""

    icd10: list[str] = Field(default_factory=list)
    cpt: list[str] = Field(default_factory=list)
    snomed: list[str] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.icd10) + len(self.cpt) + len(self.snomed)


# ── Insertion models ─────────────────────────────────────────────────


class InsertionPayload(BaseModel):
    """Data delivered to the insertion engine (``insertData`` message body)."""

    model_config = ConfigDict(populate_by_name=True)

    soap: Optional[SoapResult] = None
    icd_codes: list[Code] = Field(default_factory=list, alias="icdCodes")
    cpt_codes: list[Code] = Field(default_factory=list, alias="cptCodes")

    @model_validator(mode="before")
    @classmethod
    def _default_code_types(cls, data: Any) -> Any:
        """Entries under icdCodes/cptCodes may omit their type."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for keys, code_type in (
            (("icdCodes", "icd_codes"), CodeType.ICD10.value),
            (("cptCodes", "cpt_codes"), CodeType.CPT4.value),
        ):
            for key in keys:
                entries = data.get(key)
                if not entries:
                    continue
                filled = []
                for entry in entries:
                    if isinstance(entry, dict) and "type" not in entry and "codeType" not in entry:
                        entry = {**entry, "type": code_type}
                    filled.append(entry)
                data[key] = filled
        return data

    @property
    def codes(self) -> list[Code]:
        return [*self.icd_codes, *self.cpt_codes]

    def is_empty(self) -> bool:
        return self.soap is None and not self.icd_codes and not self.cpt_codes


class InsertionOutcome(BaseModel):
    """What an insertion attempt wrote into one document."""

    success: bool = False
    fields_written: list[str] = Field(default_factory=list)
    rows_added: int = 0
    rows_skipped: int = 0
    error: Optional[str] = None


# ── Assistant turn ───────────────────────────────────────────────────


class AssistantReply(BaseModel):
    """Outcome of one user turn, ready for rendering."""

    intent: Intent
    message: str
    ok: bool = True
    from_cache: bool = False
    soap: Optional[SoapResult] = None
    fee_slip: Optional[FeeSlipResult] = None
    codes: Optional[CodeScanResult] = None
    insertable: Optional[InsertionPayload] = None
