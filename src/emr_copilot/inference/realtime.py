"""Real-time inference backend wrapping litellm.acompletion()."""

from __future__ import annotations

import logging
from typing import Any

from emr_copilot.inference.protocols import InferenceResult

log = logging.getLogger(__name__)

_STOP_REASONS = {
    "length": "max_tokens",
    "max_tokens": "max_tokens",
    "stop": "end_turn",
    "end_turn": "end_turn",
    "stop_sequence": "end_turn",
}


def normalize_stop_reason(reason: str | None) -> str:
    """Map provider finish reasons onto ``end_turn`` / ``max_tokens``."""
    if not reason:
        return "end_turn"
    return _STOP_REASONS.get(reason, reason)


class RealTimeBackend:
    """One request, one response via ``litellm.acompletion()``.

    Parameters whose value is ``None`` are dropped, so an unset temperature
    leaves sampling at the endpoint default.
    """

    async def infer(
        self,
        messages: list[dict[str, Any]],
        model: str,
        **params: Any,
    ) -> InferenceResult:
        from litellm import acompletion

        kwargs: dict[str, Any] = {
            "model": model,
            "messages": messages,
            **{k: v for k, v in params.items() if v not in (None, "")},
        }
        response = await acompletion(**kwargs)
        choice = response.choices[0]
        content = choice.message.content or ""

        usage: dict[str, int] = {}
        if getattr(response, "usage", None):
            usage = {
                "prompt_tokens": getattr(response.usage, "prompt_tokens", 0),
                "completion_tokens": getattr(response.usage, "completion_tokens", 0),
                "total_tokens": getattr(response.usage, "total_tokens", 0),
            }

        return InferenceResult(
            content=content,
            finish_reason=normalize_stop_reason(choice.finish_reason),
            usage=usage,
        )
