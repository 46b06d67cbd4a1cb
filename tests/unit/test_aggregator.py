"""Tests for multi-frame aggregation."""

from __future__ import annotations

import logging

from emr_copilot.extraction.aggregator import FRAME_BOUNDARY, aggregate_fragments
from emr_copilot.models import FrameFragment, PageMetadata


def _fragment(text: str, *, top: bool = False, pid=None, encounter=None) -> FrameFragment:
    return FrameFragment(
        text=text,
        metadata=PageMetadata(patient_id=pid, encounter_id=encounter),
        is_top_level=top,
    )


class TestText:
    def test_joined_with_boundary_in_order(self) -> None:
        result = aggregate_fragments([_fragment("A", top=True), _fragment("B"), _fragment("C")])
        assert result.text == f"A{FRAME_BOUNDARY}B{FRAME_BOUNDARY}C"

    def test_missing_frames_skipped(self) -> None:
        result = aggregate_fragments([_fragment("A", top=True), None, _fragment("C")])
        assert result.text == f"A{FRAME_BOUNDARY}C"

    def test_single_frame_has_no_boundary(self) -> None:
        assert aggregate_fragments([_fragment("only", top=True)]).text == "only"

    def test_no_frames(self) -> None:
        result = aggregate_fragments([])
        assert result.text == ""
        assert result.metadata.patient_id is None


class TestMetadata:
    def test_embedded_frame_fills_gaps(self) -> None:
        result = aggregate_fragments(
            [_fragment("top", top=True), _fragment("frame", pid="7", encounter="42")]
        )
        assert result.metadata.patient_id == "7"
        assert result.metadata.encounter_id == "42"

    def test_top_level_wins_conflicts(self) -> None:
        result = aggregate_fragments(
            [_fragment("top", top=True, pid="1"), _fragment("frame", pid="2", encounter="9")]
        )
        assert result.metadata.patient_id == "1"
        assert result.metadata.encounter_id == "9"

    def test_later_embedded_frame_wins(self) -> None:
        result = aggregate_fragments([_fragment("a", pid="3"), _fragment("b", pid="4")])
        assert result.metadata.patient_id == "4"

    def test_empty_values_do_not_erase(self) -> None:
        result = aggregate_fragments([_fragment("a", pid="3"), _fragment("b")])
        assert result.metadata.patient_id == "3"

    def test_conflict_is_logged(self, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="emr_copilot.extraction.aggregator"):
            aggregate_fragments([_fragment("a", pid="3"), _fragment("b", top=True, pid="5")])
        assert "Conflicting patient_id" in caplog.text
