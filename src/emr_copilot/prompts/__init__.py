"""Prompt templates and their loader.

Module path convention: ``emr_copilot.prompts.templates.{domain}.{category}``.
Each template module exposes ``_PROMPT_DATA: dict[str, str]``::

    prompt = get_prompt("openemr", "soap", "SOAP_PROMPT")
"""

from __future__ import annotations

import importlib
from typing import Any

_modules: dict[tuple[str, str], Any] = {}


def get_prompt(domain: str, category: str, name: str) -> str:
    """Return the raw template string; callers ``.format()`` it.

    Raises:
        KeyError: Unknown module or prompt name.
    """
    key = (domain, category)
    if key not in _modules:
        module_path = f"emr_copilot.prompts.templates.{domain}.{category}"
        try:
            _modules[key] = importlib.import_module(module_path)
        except ModuleNotFoundError as exc:
            raise KeyError(f"Prompt module not found: {module_path}") from exc

    data: dict[str, str] | None = getattr(_modules[key], "_PROMPT_DATA", None)
    if data is not None and name in data:
        return data[name]
    raise KeyError(f"Prompt {name!r} not found in {domain}/{category}")


__all__ = ["get_prompt"]
