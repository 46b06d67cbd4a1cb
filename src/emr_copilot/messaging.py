"""Command dispatcher for the closed set of cross-context messages.

``{"action": "toggleSidePanel"}`` and ``{"action": "insertData", "data": {...}}``
each return ``{"success": bool, "error"?: str}``.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

from pydantic import ValidationError

from emr_copilot.extraction.document import PageDocument
from emr_copilot.insertion.engine import NOT_FOUND_MESSAGE, InsertionEngine
from emr_copilot.models import InsertionOutcome, InsertionPayload

log = logging.getLogger(__name__)

TOGGLE_SIDE_PANEL = "toggleSidePanel"
INSERT_DATA = "insertData"


class CommandDispatcher:
    """Routes tagged messages to the panel state or the insertion engine."""

    def __init__(self, engine: InsertionEngine | None = None) -> None:
        self._engine = engine or InsertionEngine()
        self.panel_open = False
        self.last_outcomes: list[InsertionOutcome] = []

    def dispatch(self, message: dict[str, Any], documents: Sequence[PageDocument] = ()) -> dict[str, Any]:
        action = message.get("action") if isinstance(message, dict) else None
        if action == TOGGLE_SIDE_PANEL:
            return self.toggle_side_panel()
        if action == INSERT_DATA:
            try:
                payload = InsertionPayload.model_validate(message.get("data") or {})
            except ValidationError as exc:
                return {"success": False, "error": f"Invalid insertData payload: {exc.error_count()} error(s)"}
            return self.insert_data(payload, documents)
        log.warning("Unknown message action: %r", action)
        return {"success": False, "error": f"Unknown action: {action}"}

    def toggle_side_panel(self) -> dict[str, Any]:
        self.panel_open = not self.panel_open
        return {"success": True}

    def insert_data(self, payload: InsertionPayload, documents: Sequence[PageDocument]) -> dict[str, Any]:
        """Run insertion on every frame; succeed if any frame accepted the data."""
        self.last_outcomes = [self._engine.insert(doc, payload) for doc in documents]
        if any(o.success for o in self.last_outcomes):
            return {"success": True}
        errors = [o.error for o in self.last_outcomes if o.error]
        return {"success": False, "error": errors[0] if errors else NOT_FOUND_MESSAGE}
