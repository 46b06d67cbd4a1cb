"""Result caching for generated fee slips."""

from __future__ import annotations

from emr_copilot.cache.key_strategy import encounter_key
from emr_copilot.cache.memory import ResultCache
from emr_copilot.cache.protocols import IResultCache

__all__ = ["IResultCache", "ResultCache", "encounter_key"]
