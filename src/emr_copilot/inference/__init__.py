"""Inference backends for the generation endpoint."""

from __future__ import annotations

from emr_copilot.inference.protocols import IInferenceBackend, InferenceResult
from emr_copilot.inference.realtime import RealTimeBackend, normalize_stop_reason

__all__ = [
    "IInferenceBackend",
    "InferenceResult",
    "RealTimeBackend",
    "normalize_stop_reason",
]
