"""Result cache protocol."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class IResultCache(Protocol):
    """Async cache for generated results keyed by encounter/patient."""

    async def get(self, key: str) -> Any | None:
        """Return the cached value, or None on miss."""
        ...

    async def put(self, key: str, value: Any, *, ttl_seconds: int = 0) -> None:
        """Store *value* under *key*. ``ttl_seconds=0`` uses the backend default."""
        ...

    async def clear(self) -> None: ...
