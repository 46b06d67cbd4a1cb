"""Session endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from emr_copilot.api.state import ApiState, get_state

router = APIRouter(tags=["session"])


class ResetRequest(BaseModel):
    session_id: str = "default"


@router.post("/session/reset")
async def reset(request: ResetRequest, state: ApiState = Depends(get_state)) -> dict[str, str]:
    """Start a new topic: clears corpus, last result and cached fee slips."""
    await state.session(request.session_id).reset()
    return {"status": "reset", "session_id": request.session_id}
