"""Page-type classification and host detection from URL and title substrings."""

from __future__ import annotations

# Priority-ordered: first rule whose URL or title fragment matches wins.
PAGE_TYPE_RULES: tuple[tuple[str, tuple[str, ...], tuple[str, ...]], ...] = (
    ("Fee Sheet", ("fee_sheet",), ("fee sheet",)),
    ("Encounter", ("encounter",), ("encounter",)),
    ("Patient Chart", ("patient_file", "demographics"), ()),
    ("Dashboard", ("dashboard",), ()),
)

_OPENEMR_URL_MARKERS = (
    "/interface/",
    "/openemr",
    "/patient_file/",
    "/encounter/",
    "fee_sheet",
    "/main/tabs/",
)


def classify_page(url: str, title: str) -> str:
    """Return the page-type label, or ``""`` when no rule matches."""
    url_l = (url or "").lower()
    title_l = (title or "").lower()
    for label, url_fragments, title_fragments in PAGE_TYPE_RULES:
        if any(f in url_l for f in url_fragments) or any(f in title_l for f in title_fragments):
            return label
    return ""


def is_openemr_page(url: str, title: str) -> bool:
    """Heuristic check that a page belongs to an OpenEMR installation."""
    url_l = (url or "").lower()
    if "openemr" in (title or "").lower():
        return True
    return any(marker in url_l for marker in _OPENEMR_URL_MARKERS)
