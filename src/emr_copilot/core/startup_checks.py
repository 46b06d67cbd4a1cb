"""Startup validation: fail fast on critical misconfigurations."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

from emr_copilot.exceptions import PreconditionError

if TYPE_CHECKING:
    from emr_copilot.core.config import AppSettings
    from emr_copilot.persistence.options_store import CopilotOptions

log = logging.getLogger(__name__)

# Providers that use local auth and do not require an API key
_NO_KEY_PROVIDERS = frozenset({"ollama"})

MISSING_KEY_MESSAGE = (
    "No API key configured. Set apiKey in the options store or "
    "EMR_COPILOT_LLM_API_KEY in the environment."
)


def resolve_api_key(settings: AppSettings, options: CopilotOptions | None = None) -> str:
    """Return the options-store key, else the environment key.

    Raises:
        PreconditionError: Neither source provides a key.
    """
    if options is not None and options.api_key.strip():
        return options.api_key.strip()
    if settings.llm.api_key.strip():
        return settings.llm.api_key.strip()
    if settings.llm.model.split("/", 1)[0] in _NO_KEY_PROVIDERS:
        return ""
    raise PreconditionError(MISSING_KEY_MESSAGE)


def validate_settings(settings: AppSettings, options: CopilotOptions | None = None) -> None:
    """Validate settings at startup. Raises PreconditionError on fatal misconfig.

    A missing API key only warns. Each generation call checks the key again.
    """
    _check_api_key(settings, options)
    _check_options_store(settings)
    _check_budgets(settings)


def _check_api_key(settings: AppSettings, options: CopilotOptions | None) -> None:
    try:
        resolve_api_key(settings, options)
    except PreconditionError:
        log.warning("%s Generation requests will fail until one is set.", MISSING_KEY_MESSAGE)


def _check_options_store(settings: AppSettings) -> None:
    """Warn about file-backed options in containerized environments."""
    is_container = bool(
        os.environ.get("ECS_CONTAINER_METADATA_URI") or os.environ.get("KUBERNETES_SERVICE_HOST")
    )
    if is_container and settings.options.backend == "file":
        log.warning(
            "EMR_COPILOT_OPTIONS_BACKEND=file in a container environment. "
            "Options will be lost on container restart."
        )


def _check_budgets(settings: AppSettings) -> None:
    """Per-intent corpus prefixes must fit inside the extracted corpus."""
    cap = settings.extraction.max_corpus_chars
    for name in ("fee_slip_corpus_chars", "soap_corpus_chars"):
        if getattr(settings.generation, name) > cap:
            raise PreconditionError(
                f"EMR_COPILOT_GENERATION_{name.upper()} exceeds the extraction corpus cap ({cap})"
            )
