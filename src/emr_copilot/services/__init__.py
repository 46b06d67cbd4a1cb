"""Turn orchestration services."""

from __future__ import annotations

from emr_copilot.services.assistant_service import AssistantService, classify_intent

__all__ = ["AssistantService", "classify_intent"]
