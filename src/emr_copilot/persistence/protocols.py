"""Persistence backend protocol: the contract all backends implement."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class IPersistenceBackend(Protocol):
    """Key-value store for serialized JSON documents."""

    def save(self, key: str, data: str) -> None:
        """Save serialized data under the given key."""
        ...

    def load(self, key: str) -> str:
        """Load serialized data by key. Raises KeyError if not found."""
        ...
