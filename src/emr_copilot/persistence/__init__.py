"""Pluggable persistence backends and the options store built on them."""

from __future__ import annotations

from emr_copilot.persistence.file_backend import FilePersistenceBackend
from emr_copilot.persistence.memory_backend import MemoryPersistenceBackend
from emr_copilot.persistence.options_store import (
    CopilotOptions,
    OptionsStore,
    create_options_store,
)
from emr_copilot.persistence.protocols import IPersistenceBackend

__all__ = [
    "CopilotOptions",
    "FilePersistenceBackend",
    "IPersistenceBackend",
    "MemoryPersistenceBackend",
    "OptionsStore",
    "create_options_store",
]
