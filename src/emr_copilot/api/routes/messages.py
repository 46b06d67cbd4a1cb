"""Cross-context message endpoint (``toggleSidePanel`` / ``insertData``)."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from emr_copilot.api.state import ApiState, PageInput, get_state

router = APIRouter(tags=["messages"])


class MessageRequest(BaseModel):
    action: str
    data: dict[str, Any] | None = None
    pages: list[PageInput] = Field(default_factory=list)


class MessageResponse(BaseModel):
    success: bool
    error: str | None = None
    panel_open: bool


@router.post("/messages", response_model=MessageResponse)
async def message(request: MessageRequest, state: ApiState = Depends(get_state)) -> MessageResponse:
    documents = [p.to_document() for p in request.pages]
    result = state.dispatcher.dispatch(request.model_dump(include={"action", "data"}), documents)
    return MessageResponse(
        success=result["success"],
        error=result.get("error"),
        panel_open=state.dispatcher.panel_open,
    )
