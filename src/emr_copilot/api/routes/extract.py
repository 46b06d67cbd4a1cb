"""Page extraction endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from emr_copilot.api.state import ApiState, PageInput, get_state
from emr_copilot.extraction.page_classifier import classify_page, is_openemr_page
from emr_copilot.models import PageMetadata

router = APIRouter(tags=["extraction"])


class ExtractRequest(BaseModel):
    pages: list[PageInput] = Field(..., min_length=1)


class ExtractResponse(BaseModel):
    text: str
    metadata: PageMetadata
    page_types: list[str]
    is_openemr: bool


@router.post("/extract", response_model=ExtractResponse)
async def extract(request: ExtractRequest, state: ApiState = Depends(get_state)) -> ExtractResponse:
    """Extract and aggregate every supplied frame into one bounded corpus."""
    documents = [p.to_document() for p in request.pages]
    result = state.service.extract(documents)
    return ExtractResponse(
        text=result.text,
        metadata=result.metadata,
        page_types=[classify_page(d.url, d.title) for d in documents],
        is_openemr=any(is_openemr_page(d.url, d.title) for d in documents),
    )
