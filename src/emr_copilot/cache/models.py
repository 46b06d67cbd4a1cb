"""Cache entry wrapper with TTL tracking."""

from __future__ import annotations

import dataclasses
import time
from typing import Any


@dataclasses.dataclass
class CacheEntry:
    """Metadata wrapper for cached values with TTL tracking."""

    key: str
    value: Any
    created_at: float = dataclasses.field(default_factory=time.time)
    ttl_seconds: int = 0

    @property
    def is_expired(self) -> bool:
        if self.ttl_seconds <= 0:
            return False
        return (time.time() - self.created_at) >= self.ttl_seconds
