"""Inference backend protocol: the contract every endpoint transport implements."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable


@dataclass
class InferenceResult:
    """Result from a single inference call.

    ``finish_reason`` is normalized to ``end_turn`` or ``max_tokens``; other
    provider reasons pass through unchanged.
    """

    content: str
    finish_reason: str = "end_turn"
    usage: dict[str, int] = field(default_factory=dict)


@runtime_checkable
class IInferenceBackend(Protocol):
    """Protocol for pluggable inference backends."""

    async def infer(
        self,
        messages: list[dict[str, Any]],
        model: str,
        **params: Any,
    ) -> InferenceResult:
        """Run a single inference call.

        Args:
            messages: Chat messages in OpenAI format.
            model: Model identifier (supports LiteLLM prefixes).
            **params: ``max_tokens``, ``temperature``, ``api_key``, ``timeout`` ...

        Returns:
            InferenceResult with content and metadata.
        """
        ...
