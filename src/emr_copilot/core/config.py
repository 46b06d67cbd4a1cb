"""Nested pydantic-settings configuration for the application.

Each sub-config reads its own ``EMR_COPILOT_<GROUP>_*`` env vars::

    export EMR_COPILOT_LLM_API_KEY=sk-ant-...
    export EMR_COPILOT_LLM_MODEL=anthropic/claude-3-haiku-20240307
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class LLMConfig(BaseSettings):
    """Generation endpoint configuration.

    Env vars use ``EMR_COPILOT_LLM_`` prefix.
    """

    model_config = {"env_prefix": "EMR_COPILOT_LLM_"}

    model: str = "anthropic/claude-3-haiku-20240307"
    api_key: str = ""
    api_base: str = ""
    timeout: float = 60.0
    max_retries: int = Field(default=2, ge=1)
    retry_jitter_factor: float = 0.5
    retry_max_delay: float = 8.0


class GenerationConfig(BaseSettings):
    """Per-intent prompt budgets and sampling.

    Env vars use ``EMR_COPILOT_GENERATION_`` prefix.
    """

    model_config = {"env_prefix": "EMR_COPILOT_GENERATION_"}

    default_temperature: float = 0.7
    fee_slip_temperature: float = 0.0
    fee_slip_corpus_chars: int = 4000
    soap_corpus_chars: int = 2500
    chat_max_tokens: int = 1024
    soap_max_tokens: int = 4096
    fee_slip_max_tokens: int = 1024


class ExtractionConfig(BaseSettings):
    """Corpus bounds for page extraction.

    Env vars use ``EMR_COPILOT_EXTRACTION_`` prefix.
    """

    model_config = {"env_prefix": "EMR_COPILOT_EXTRACTION_"}

    max_corpus_chars: int = 20_000
    raw_text_chars: int = 10_000
    fallback_chars: int = 16_000
    min_table_chars: int = 20
    max_table_chars: int = 5000


class CacheConfig(BaseSettings):
    """Fee-slip result cache.

    Env vars use ``EMR_COPILOT_CACHE_`` prefix. ``max_entries=0`` and
    ``ttl_seconds=0`` (the defaults) keep entries until the session is reset.
    """

    model_config = {"env_prefix": "EMR_COPILOT_CACHE_"}

    max_entries: int = 0
    ttl_seconds: int = 0


class OptionsStoreConfig(BaseSettings):
    """Where user options (API key, code-system toggles) are persisted.

    Env vars use ``EMR_COPILOT_OPTIONS_`` prefix.
    """

    model_config = {"env_prefix": "EMR_COPILOT_OPTIONS_"}

    backend: Literal["file", "memory"] = "file"
    store_path: Path = Path("./.emr_copilot")


class ObservabilityConfig(BaseSettings):
    """Logging configuration.

    Env vars use ``EMR_COPILOT_OBSERVABILITY_`` prefix.
    """

    model_config = {"env_prefix": "EMR_COPILOT_OBSERVABILITY_"}

    service_name: str = "emr-copilot"
    log_level: str = "INFO"


class APIConfig(BaseSettings):
    """FastAPI application metadata.

    Env vars use ``EMR_COPILOT_API_`` prefix.
    """

    model_config = {"env_prefix": "EMR_COPILOT_API_"}

    title: str = "EMR Copilot"
    description: str = "Extract, draft and insert clinical documentation for OpenEMR pages"


class AppSettings(BaseSettings):
    """Top-level application settings aggregating all sub-configs."""

    llm: LLMConfig = LLMConfig()
    generation: GenerationConfig = GenerationConfig()
    extraction: ExtractionConfig = ExtractionConfig()
    cache: CacheConfig = CacheConfig()
    options: OptionsStoreConfig = OptionsStoreConfig()
    observability: ObservabilityConfig = ObservabilityConfig()
    api: APIConfig = APIConfig()
