"""Application state shared by the routes: services, sessions, dispatcher."""

from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING

from fastapi import Request
from pydantic import BaseModel

from emr_copilot.cache.memory import ResultCache
from emr_copilot.extraction.document import PageDocument
from emr_copilot.session import SessionContext

if TYPE_CHECKING:
    from emr_copilot.core.config import AppSettings
    from emr_copilot.messaging import CommandDispatcher
    from emr_copilot.persistence.options_store import OptionsStore
    from emr_copilot.services.assistant_service import AssistantService


class PageInput(BaseModel):
    """One serialized browsing context: top-level page or embedded frame."""

    html: str
    url: str = ""
    title: str | None = None
    is_top_level: bool = True

    def to_document(self) -> PageDocument:
        return PageDocument(self.html, url=self.url, title=self.title, is_top_level=self.is_top_level)


@dataclasses.dataclass
class ApiState:
    settings: AppSettings
    options_store: OptionsStore
    service: AssistantService
    dispatcher: CommandDispatcher
    sessions: dict[str, SessionContext] = dataclasses.field(default_factory=dict)

    def session(self, session_id: str) -> SessionContext:
        if session_id not in self.sessions:
            cache = ResultCache(
                max_entries=self.settings.cache.max_entries,
                default_ttl_seconds=self.settings.cache.ttl_seconds,
            )
            self.sessions[session_id] = SessionContext(session_id=session_id, cache=cache)
        return self.sessions[session_id]


def get_state(request: Request) -> ApiState:
    return request.app.state.copilot
