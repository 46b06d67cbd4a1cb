"""In-memory result cache with optional LRU bound, TTL support and async safety."""

from __future__ import annotations

import asyncio
import logging
from collections import OrderedDict
from typing import Any

from emr_copilot.cache.models import CacheEntry

log = logging.getLogger(__name__)


class ResultCache:
    """OrderedDict-based cache with TTL expiry.

    ``max_entries=0`` never evicts, so a session keeps every result until it
    is reset. A positive bound evicts the least recently used entry.

    Guarded by an ``asyncio.Lock`` so concurrent turns never observe a
    half-written entry.
    """

    def __init__(self, max_entries: int = 0, default_ttl_seconds: int = 0) -> None:
        self._max_entries = max_entries
        self._default_ttl = default_ttl_seconds
        self._store: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> Any | None:
        async with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            if entry.is_expired:
                del self._store[key]
                log.debug("Cache entry expired: %s", key)
                return None
            self._store.move_to_end(key)
            return entry.value

    async def put(self, key: str, value: Any, *, ttl_seconds: int = 0) -> None:
        async with self._lock:
            self._store.pop(key, None)
            self._store[key] = CacheEntry(
                key=key,
                value=value,
                ttl_seconds=ttl_seconds or self._default_ttl,
            )
            while 0 < self._max_entries < len(self._store):
                evicted, _ = self._store.popitem(last=False)
                log.debug("Evicted cache entry: %s", evicted)

    async def clear(self) -> None:
        async with self._lock:
            self._store.clear()

    def __len__(self) -> int:
        return len(self._store)
