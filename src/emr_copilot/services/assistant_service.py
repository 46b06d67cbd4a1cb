"""Assistant service: one user turn through extract, generate, recover, render."""

from __future__ import annotations

import logging
from typing import Sequence

from emr_copilot.cache.key_strategy import encounter_key
from emr_copilot.exceptions import CopilotError, PreconditionError
from emr_copilot.extraction.aggregator import aggregate_fragments
from emr_copilot.extraction.code_scanner import scan_codes
from emr_copilot.extraction.document import PageDocument
from emr_copilot.extraction.extractor import ContentExtractor
from emr_copilot.extraction.page_classifier import is_openemr_page
from emr_copilot.formatters.text_formatter import TextFormatter
from emr_copilot.generation.client import GenerationClient
from emr_copilot.hooks.logging_config import bind_session
from emr_copilot.models import (
    AssistantReply,
    ExtractionResult,
    FeeSlipResult,
    InsertionPayload,
    Intent,
)
from emr_copilot.persistence.options_store import OptionsStore
from emr_copilot.recovery.parser import parse_fee_slip, parse_soap
from emr_copilot.session import SessionContext

log = logging.getLogger(__name__)

WRONG_HOST_MESSAGE = "wrong host context: no OpenEMR page is open"
TRUNCATED_CHAT_NOTICE = "(Response was cut off at the length limit.)"

_FAILURE_PREFIX = {
    Intent.SOAP: "I had trouble generating the note",
    Intent.FEE_SLIP: "I had trouble generating the fee slip",
    Intent.CHAT: "I had trouble answering",
    Intent.CODE_EXTRACTION: "I had trouble finding codes",
}


def classify_intent(text: str) -> Intent:
    """Keyword rules, checked in order: SOAP, fee slip, code extraction, chat."""
    lowered = text.lower()
    if "draft soap" in lowered or ("soap" in lowered and "note" in lowered):
        return Intent.SOAP
    if "fee slip" in lowered or "superbill" in lowered:
        return Intent.FEE_SLIP
    if "find codes" in lowered or ("code" in lowered and "extract" in lowered):
        return Intent.CODE_EXTRACTION
    return Intent.CHAT


class AssistantService:
    """Runs user turns against the open page documents of a session."""

    def __init__(
        self,
        generation_client: GenerationClient,
        options_store: OptionsStore,
        *,
        extractor: ContentExtractor | None = None,
        formatter: TextFormatter | None = None,
    ) -> None:
        self._client = generation_client
        self._options = options_store
        self._extractor = extractor or ContentExtractor()
        self._formatter = formatter or TextFormatter()

    # ── Extraction ───────────────────────────────────────────────────

    def extract(self, documents: Sequence[PageDocument]) -> ExtractionResult:
        """Extract every frame and aggregate into one corpus."""
        return aggregate_fragments(self._extractor.extract_fragment(d) for d in documents)

    @staticmethod
    def check_host(documents: Sequence[PageDocument]) -> None:
        if not any(is_openemr_page(d.url, d.title) for d in documents):
            raise PreconditionError(WRONG_HOST_MESSAGE)

    # ── Turns ────────────────────────────────────────────────────────

    async def handle_turn(
        self,
        session: SessionContext,
        user_text: str,
        documents: Sequence[PageDocument],
    ) -> AssistantReply:
        """Classify *user_text*, refresh the corpus and run the matching pipeline.

        Failures abort only this turn: they come back as an ``ok=False`` reply
        and leave the cache and the last result untouched.
        """
        intent = classify_intent(user_text)
        async with session.lock:
            bind_session(session.session_id, intent=intent.value)
            try:
                self.check_host(documents)
                extraction = self.extract(documents)
                session.last_extracted_text = extraction.text
                session.current_metadata = extraction.metadata
                log.info(
                    "Turn started",
                    extra={"corpus_chars": len(extraction.text), "frames": len(documents)},
                )
                return await self._dispatch(session, intent, user_text)
            except CopilotError as exc:
                return self._failure(intent, exc)

    async def _dispatch(self, session: SessionContext, intent: Intent, user_text: str) -> AssistantReply:
        if intent is Intent.CODE_EXTRACTION:
            return self._codes(session)
        if intent is Intent.SOAP:
            return await self._soap(session)
        if intent is Intent.FEE_SLIP:
            return await self._fee_slip(session)
        return await self._chat(session, user_text)

    def _with_footer(self, session: SessionContext, body: str) -> str:
        return f"{body}\n\n{self._formatter.footer(session.current_metadata)}"

    def _codes(self, session: SessionContext) -> AssistantReply:
        scan = scan_codes(session.last_extracted_text, self._options.load())
        message = self._formatter.codes(scan)
        if scan.total:
            message = self._with_footer(session, message)
        return AssistantReply(intent=Intent.CODE_EXTRACTION, message=message, codes=scan)

    async def _soap(self, session: SessionContext) -> AssistantReply:
        response = await self._client.generate(
            Intent.SOAP, session.last_extracted_text, session.current_metadata
        )
        soap = parse_soap(response.text, response.stop_reason)
        payload = InsertionPayload(soap=soap)
        session.last_generated_result = payload
        return AssistantReply(
            intent=Intent.SOAP,
            message=self._with_footer(session, self._formatter.soap(soap)),
            soap=soap,
            insertable=payload,
        )

    async def _fee_slip(self, session: SessionContext) -> AssistantReply:
        key = encounter_key(session.current_metadata)
        result: FeeSlipResult | None = await session.cache.get(key)
        from_cache = result is not None
        if result is None:
            response = await self._client.generate(
                Intent.FEE_SLIP, session.last_extracted_text, session.current_metadata
            )
            result = parse_fee_slip(response.text, response.stop_reason)
            await session.cache.put(key, result)
            log.info("Cached fee slip for %s", key)
        else:
            log.info("Using cached fee slip for %s", key)

        icd, cpt = result.to_codes()
        payload = InsertionPayload(icd_codes=icd, cpt_codes=cpt)
        session.last_generated_result = payload
        return AssistantReply(
            intent=Intent.FEE_SLIP,
            message=self._with_footer(session, self._formatter.fee_slip(result, cached=from_cache)),
            from_cache=from_cache,
            fee_slip=result,
            insertable=payload,
        )

    async def _chat(self, session: SessionContext, user_text: str) -> AssistantReply:
        response = await self._client.generate(
            Intent.CHAT,
            session.last_extracted_text,
            session.current_metadata,
            user_query=user_text,
        )
        message = response.text
        if response.truncated:
            message = f"{message}\n\n{TRUNCATED_CHAT_NOTICE}"
        return AssistantReply(intent=Intent.CHAT, message=self._with_footer(session, message))

    @staticmethod
    def _failure(intent: Intent, exc: CopilotError) -> AssistantReply:
        if isinstance(exc, PreconditionError):
            log.warning("Turn precondition failed: %s", exc)
            message = str(exc)
        else:
            log.warning("Turn failed (%s): %s", type(exc).__name__, exc)
            message = f"{_FAILURE_PREFIX[intent]}: {exc}"
        return AssistantReply(intent=intent, message=message, ok=False)
