"""Prompt building and endpoint invocation."""

from __future__ import annotations

from emr_copilot.generation.client import GenerationClient, is_summary_request

__all__ = ["GenerationClient", "is_summary_request"]
