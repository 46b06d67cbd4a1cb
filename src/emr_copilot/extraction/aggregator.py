"""Merge per-frame extraction results into one corpus and one metadata set."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from emr_copilot.models import ExtractionResult, FrameFragment, PageMetadata

log = logging.getLogger(__name__)

FRAME_BOUNDARY = "\n\n--- FRAME BOUNDARY ---\n\n"

_MERGED_FIELDS = ("patient_id", "encounter_id", "source_url")


def aggregate_fragments(fragments: Iterable[Optional[FrameFragment]]) -> ExtractionResult:
    """Join frame texts with :data:`FRAME_BOUNDARY` in iteration order.

    Metadata is merged last-write-wins over non-empty values, with embedded
    frames applied before top-level ones. The top-level frame therefore wins
    any conflict; among frames of the same rank the later one wins.
    """
    present = [f for f in fragments if f is not None]
    text = FRAME_BOUNDARY.join(f.text for f in present)

    ordered = [f for f in present if not f.is_top_level] + [f for f in present if f.is_top_level]
    merged: dict[str, str] = {}
    for fragment in ordered:
        for field in _MERGED_FIELDS:
            value = getattr(fragment.metadata, field)
            if not value:
                continue
            previous = merged.get(field)
            if previous and previous != value and field != "source_url":
                log.warning("Conflicting %s across frames: %r replaced by %r", field, previous, value)
            merged[field] = value

    return ExtractionResult(text=text, metadata=PageMetadata(**merged))
