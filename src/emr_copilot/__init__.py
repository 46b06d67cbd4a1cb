"""emr-copilot: extract clinical content from OpenEMR pages, draft SOAP notes and
fee slips with an LLM, and write the results back idempotently.

Usage::

    from emr_copilot import (
        AppSettings, PageDocument, ContentExtractor, GenerationClient,
        AssistantService, SessionContext, InsertionEngine,
    )
"""

from __future__ import annotations

from emr_copilot.core.config import AppSettings
from emr_copilot.extraction import ContentExtractor, PageDocument, aggregate_fragments
from emr_copilot.generation import GenerationClient
from emr_copilot.insertion import InsertionEngine
from emr_copilot.messaging import CommandDispatcher
from emr_copilot.models import (
    AssistantReply,
    Code,
    CodeType,
    ExtractionResult,
    FeeSlipResult,
    InsertionOutcome,
    InsertionPayload,
    Intent,
    PageMetadata,
    SoapResult,
)
from emr_copilot.recovery import parse_fee_slip, parse_soap
from emr_copilot.services import AssistantService, classify_intent
from emr_copilot.session import SessionContext

__all__ = [
    "AppSettings",
    "AssistantReply",
    "AssistantService",
    "Code",
    "CodeType",
    "CommandDispatcher",
    "ContentExtractor",
    "ExtractionResult",
    "FeeSlipResult",
    "GenerationClient",
    "InsertionEngine",
    "InsertionOutcome",
    "InsertionPayload",
    "Intent",
    "PageDocument",
    "PageMetadata",
    "SessionContext",
    "SoapResult",
    "aggregate_fragments",
    "classify_intent",
    "parse_fee_slip",
    "parse_soap",
]
