"""Assistant turn endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from emr_copilot.api.state import ApiState, PageInput, get_state
from emr_copilot.formatters.text_formatter import TextFormatter
from emr_copilot.models import AssistantReply

router = APIRouter(tags=["assistant"])


class AssistRequest(BaseModel):
    session_id: str = "default"
    message: str = Field(..., min_length=1)
    pages: list[PageInput] = Field(..., min_length=1)


class AssistResponse(BaseModel):
    session_id: str
    reply: AssistantReply
    copy_text: str = ""
    links: dict[str, str] = Field(default_factory=dict)


@router.post("/assist", response_model=AssistResponse)
async def assist(request: AssistRequest, state: ApiState = Depends(get_state)) -> AssistResponse:
    """Run one user turn against the supplied frames."""
    session = state.session(request.session_id)
    documents = [p.to_document() for p in request.pages]
    reply = await state.service.handle_turn(session, request.message, documents)

    formatter = TextFormatter()
    return AssistResponse(
        session_id=session.session_id,
        reply=reply,
        copy_text=formatter.copy_text(reply.insertable),
        links=formatter.navigation_links(session.current_metadata) if reply.ok else {},
    )
