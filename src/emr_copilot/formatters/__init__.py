"""Reply formatters."""

from __future__ import annotations

from emr_copilot.formatters.text_formatter import TextFormatter, interface_base_url

__all__ = ["TextFormatter", "interface_base_url"]
