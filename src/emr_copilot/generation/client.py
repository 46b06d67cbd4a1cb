"""Intent-specific prompt building and endpoint invocation with retries."""

from __future__ import annotations

import asyncio
import logging
import random
import re
from typing import TYPE_CHECKING, Any

from emr_copilot.core.startup_checks import resolve_api_key
from emr_copilot.exceptions import NonRetryableError, RetryableError
from emr_copilot.inference.realtime import RealTimeBackend
from emr_copilot.models import GenerationRequest, GenerationResponse, Intent, PageMetadata
from emr_copilot.prompts import get_prompt

if TYPE_CHECKING:
    from emr_copilot.core.config import AppSettings
    from emr_copilot.inference.protocols import IInferenceBackend
    from emr_copilot.persistence.options_store import CopilotOptions, OptionsStore

log = logging.getLogger(__name__)

SUMMARY_PATTERN = re.compile(r"\b(summary|summarize|history|overview|review)\b", re.IGNORECASE)

PROMPT_DOMAIN = "openemr"


def is_summary_request(user_query: str | None) -> bool:
    return bool(user_query and SUMMARY_PATTERN.search(user_query))


class GenerationClient:
    """Builds one prompt per intent and calls the endpoint once per logical call.

    Fee slips run at ``generation.fee_slip_temperature`` so repeated calls on the
    same corpus give the same codes. Chat and SOAP use the default temperature.
    """

    def __init__(
        self,
        settings: AppSettings,
        backend: IInferenceBackend | None = None,
        options_store: OptionsStore | None = None,
    ) -> None:
        self._settings = settings
        self._backend = backend or RealTimeBackend()
        self._options_store = options_store

    @property
    def model(self) -> str:
        return self._settings.llm.model

    def _options(self) -> CopilotOptions | None:
        return self._options_store.load() if self._options_store is not None else None

    @staticmethod
    def _is_retryable(exc: Exception) -> bool:
        """Auth, bad-request and not-found errors fail immediately; everything else retries."""
        from litellm.exceptions import AuthenticationError, BadRequestError, NotFoundError

        return not isinstance(exc, (AuthenticationError, BadRequestError, NotFoundError))

    # ── Prompt building ──────────────────────────────────────────────

    def build_request(
        self,
        intent: Intent,
        corpus: str,
        *,
        user_query: str | None = None,
        max_text_length: int | None = None,
    ) -> GenerationRequest:
        """Embed the intent-capped corpus in its prompt template."""
        gen = self._settings.generation

        if intent is Intent.FEE_SLIP:
            prompt = get_prompt(PROMPT_DOMAIN, "fee_slip", "FEE_SLIP_PROMPT").format(
                corpus=corpus[: gen.fee_slip_corpus_chars]
            )
            return GenerationRequest(
                intent=intent,
                prompt=prompt,
                temperature=gen.fee_slip_temperature,
                max_tokens=gen.fee_slip_max_tokens,
            )

        if intent is Intent.SOAP:
            prompt = get_prompt(PROMPT_DOMAIN, "soap", "SOAP_PROMPT").format(
                corpus=corpus[: gen.soap_corpus_chars]
            )
            return GenerationRequest(
                intent=intent,
                prompt=prompt,
                temperature=gen.default_temperature,
                max_tokens=gen.soap_max_tokens,
            )

        if intent is Intent.CHAT:
            cap = min(self._settings.extraction.max_corpus_chars, max_text_length or 10**9)
            bounded = corpus[:cap] or get_prompt(PROMPT_DOMAIN, "chat", "NO_CONTENT")
            summary = (
                get_prompt(PROMPT_DOMAIN, "chat", "SUMMARY_INSTRUCTIONS")
                if is_summary_request(user_query)
                else ""
            )
            prompt = get_prompt(PROMPT_DOMAIN, "chat", "CHAT_USER_PROMPT").format(
                corpus=bounded,
                user_query=user_query or "",
                summary_instructions=summary,
            )
            return GenerationRequest(
                intent=intent,
                prompt=prompt,
                temperature=gen.default_temperature,
                max_tokens=gen.chat_max_tokens,
            )

        raise ValueError(f"Intent {intent.value!r} does not call the generation endpoint")

    def _messages(self, request: GenerationRequest) -> list[dict[str, Any]]:
        messages: list[dict[str, Any]] = []
        if request.intent is Intent.CHAT:
            messages.append(
                {"role": "system", "content": get_prompt(PROMPT_DOMAIN, "chat", "CHAT_SYSTEM_PROMPT")}
            )
        messages.append({"role": "user", "content": request.prompt})
        return messages

    # ── Invocation ───────────────────────────────────────────────────

    async def generate(
        self,
        intent: Intent,
        corpus: str,
        metadata: PageMetadata | None = None,
        *,
        user_query: str | None = None,
    ) -> GenerationResponse:
        """Build the prompt for *intent* and return the raw endpoint response.

        Raises:
            PreconditionError: No API key is configured. Raised before any call.
            NonRetryableError: Auth or bad-request failure.
            RetryableError: Transport failure persisting past the retry budget.
        """
        options = self._options()
        api_key = resolve_api_key(self._settings, options)
        request = self.build_request(
            intent,
            corpus,
            user_query=user_query,
            max_text_length=options.max_text_length if options else None,
        )
        log.info(
            "Generating %s response",
            intent.value,
            extra={
                "prompt_chars": len(request.prompt),
                "encounter": metadata.encounter_id if metadata else None,
            },
        )
        return await self.send(request, api_key=api_key)

    async def send(self, request: GenerationRequest, *, api_key: str) -> GenerationResponse:
        """Invoke the backend with timeout, exponential backoff and jitter."""
        llm = self._settings.llm
        params: dict[str, Any] = {
            "max_tokens": request.max_tokens,
            "temperature": request.temperature,
            "api_key": api_key,
            "api_base": llm.api_base or None,
            "timeout": llm.timeout,
        }
        messages = self._messages(request)

        last_error: Exception | None = None
        for attempt in range(llm.max_retries):
            try:
                result = await self._backend.infer(messages, llm.model, **params)
                return GenerationResponse(
                    text=result.content,
                    stop_reason=result.finish_reason,
                    usage=result.usage,
                )
            except Exception as e:
                last_error = e
                if not self._is_retryable(e):
                    raise NonRetryableError(f"Generation endpoint error: {e}") from e

                base_wait = min(2**attempt, llm.retry_max_delay)
                wait = base_wait + random.uniform(0, base_wait * llm.retry_jitter_factor)
                log.warning(
                    "Generation retry %d/%d: %s (wait=%.1fs)",
                    attempt + 1,
                    llm.max_retries,
                    e,
                    wait,
                )
                if attempt < llm.max_retries - 1:
                    await asyncio.sleep(wait)

        raise RetryableError(
            f"Generation endpoint failed after {llm.max_retries} attempts: {last_error}"
        ) from last_error
