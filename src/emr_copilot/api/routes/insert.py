"""Insertion endpoint: write a result back into the supplied frames."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from emr_copilot.api.state import ApiState, PageInput, get_state
from emr_copilot.exceptions import PreconditionError
from emr_copilot.models import InsertionOutcome, InsertionPayload

router = APIRouter(tags=["insertion"])


class InsertRequest(BaseModel):
    session_id: str = "default"
    pages: list[PageInput] = Field(..., min_length=1)
    data: InsertionPayload | None = None


class PageOutput(BaseModel):
    url: str
    html: str
    events: list[dict[str, object]] = Field(default_factory=list)


class InsertResponse(BaseModel):
    success: bool
    error: str | None = None
    outcomes: list[InsertionOutcome]
    pages: list[PageOutput]


@router.post("/insert", response_model=InsertResponse)
async def insert(request: InsertRequest, state: ApiState = Depends(get_state)) -> InsertResponse:
    """Insert ``data``, or the session's last generated result when omitted."""
    payload = request.data
    if payload is None:
        payload = state.session(request.session_id).last_generated_result
    if payload is None:
        raise PreconditionError("Nothing to insert: no data supplied and no result generated yet")

    documents = [p.to_document() for p in request.pages]
    result = state.dispatcher.insert_data(payload, documents)
    return InsertResponse(
        success=result["success"],
        error=result.get("error"),
        outcomes=state.dispatcher.last_outcomes,
        pages=[
            PageOutput(
                url=d.url,
                html=d.render(),
                events=[{"type": e.type, "tag": e.tag, "id": e.element_id, "name": e.name} for e in d.events],
            )
            for d in documents
        ],
    )
