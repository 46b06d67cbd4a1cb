"""Cache key computation for per-encounter results."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from emr_copilot.models import PageMetadata

UNKNOWN = "unknown"


def encounter_key(metadata: PageMetadata) -> str:
    """Key a result by ``<encounter>_<patient>``.

    Missing identifiers collapse to ``unknown``, so every page without ids
    shares one slot.
    """
    return f"{metadata.encounter_id or UNKNOWN}_{metadata.patient_id or UNKNOWN}"
