"""Process-wide hooks: logging setup and per-turn log context."""

from __future__ import annotations

from emr_copilot.hooks.logging_config import bind_session, setup_logging

__all__ = [
    "bind_session",
    "setup_logging",
]
