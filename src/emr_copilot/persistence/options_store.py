"""Persisted user options: API key, code-system toggles, text limit.

Stored as one JSON document under the ``options`` key using the camelCase
names the settings page writes (``apiKey``, ``maxTextLength`` ...).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from emr_copilot.persistence.file_backend import FilePersistenceBackend
from emr_copilot.persistence.memory_backend import MemoryPersistenceBackend

if TYPE_CHECKING:
    from emr_copilot.core.config import OptionsStoreConfig
    from emr_copilot.persistence.protocols import IPersistenceBackend

log = logging.getLogger(__name__)

OPTIONS_KEY = "options"


class CopilotOptions(BaseModel):
    """User-editable options with their defaults."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    api_key: str = Field(default="", alias="apiKey")
    enable_validation: bool = Field(default=True, alias="enableValidation")
    auto_link: bool = Field(default=True, alias="autoLink")
    icd10: bool = True
    cpt: bool = True
    snomed: bool = True
    max_text_length: int = Field(default=50_000, alias="maxTextLength", gt=0)

    def redacted(self) -> dict[str, Any]:
        """Wire form with the API key masked, for display."""
        data = self.model_dump(by_alias=True)
        if self.api_key:
            data["apiKey"] = f"{self.api_key[:7]}..." if len(self.api_key) > 10 else "***"
        return data


class OptionsStore:
    """Read and write :class:`CopilotOptions` through a persistence backend."""

    def __init__(self, backend: IPersistenceBackend) -> None:
        self._backend = backend

    def load(self) -> CopilotOptions:
        """Return stored options, or defaults when nothing valid is stored."""
        try:
            raw = self._backend.load(OPTIONS_KEY)
        except KeyError:
            return CopilotOptions()
        try:
            return CopilotOptions.model_validate_json(raw)
        except ValidationError as exc:
            log.warning("Stored options are invalid, using defaults: %s", exc)
            return CopilotOptions()

    def save(self, options: CopilotOptions) -> None:
        self._backend.save(OPTIONS_KEY, options.model_dump_json(by_alias=True))

    def update(self, **changes: Any) -> CopilotOptions:
        """Merge *changes* (snake_case or camelCase keys) into the stored options."""
        current = self.load().model_dump(by_alias=True)
        aliases = {name: field.alias or name for name, field in CopilotOptions.model_fields.items()}
        for key, value in changes.items():
            current[aliases.get(key, key)] = value
        options = CopilotOptions.model_validate(current)
        self.save(options)
        return options


def create_options_store(config: OptionsStoreConfig) -> OptionsStore:
    """Build an options store for the configured backend."""
    if config.backend == "memory":
        return OptionsStore(MemoryPersistenceBackend())
    return OptionsStore(FilePersistenceBackend(config.store_path))
