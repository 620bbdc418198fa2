"""In-memory TTL + LRU cache with single-flight fetch coalescing."""

from __future__ import annotations

import asyncio
import inspect
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from loguru import logger

Producer = Callable[[], Awaitable[Any] | Any]

DEFAULT_MAX_ENTRIES = 1000


@dataclass(slots=True)
class CacheEntry:
    """A single cached value. ``ttl`` of None never expires on time."""

    key: str
    value: Any
    created_at: float
    ttl: float | None = None

    def is_expired(self, now: float) -> bool:
        return self.ttl is not None and now > self.created_at + self.ttl


class EphemeralCache:
    """
    Non-persistent key/value cache for read-mostly upstream data.

    Entries expire after their own TTL and the store is capped at ``max_entries``;
    past the cap the least recently used entry is dropped regardless of TTL.
    Concurrent ``get_or_fetch`` calls for one key share a single producer call.
    """

    def __init__(
        self,
        *,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries <= 0:
            raise ValueError("max_entries must be greater than 0")
        self._max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._inflight: dict[str, asyncio.Task[Any]] = {}
        self.hits = 0
        self.misses = 0

    @property
    def max_entries(self) -> int:
        return self._max_entries

    def _live_entry(self, key: str) -> CacheEntry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        return entry

    def get(self, key: str, default: Any = None) -> Any:
        entry = self._live_entry(key)
        return entry.value if entry is not None else default

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        if ttl is not None and ttl < 0:
            raise ValueError("ttl must be non-negative or None")
        self._entries[key] = CacheEntry(key=key, value=value, created_at=self._clock(), ttl=ttl)
        self._entries.move_to_end(key)
        self._evict()

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    def prune(self) -> int:
        """Drop expired entries; returns how many were removed."""
        now = self._clock()
        stale = [k for k, e in self._entries.items() if e.is_expired(now)]
        for k in stale:
            del self._entries[k]
        return len(stale)

    def _evict(self) -> None:
        if len(self._entries) <= self._max_entries:
            return
        self.prune()
        while len(self._entries) > self._max_entries:
            key, _ = self._entries.popitem(last=False)
            logger.debug("Cache evicted key={}", key)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self._live_entry(key) is not None

    def __len__(self) -> int:
        self.prune()
        return len(self._entries)

    def is_fetching(self, key: str) -> bool:
        return key in self._inflight

    async def get_or_fetch(self, key: str, ttl: float | None, producer: Producer) -> Any:
        """Return the live value for ``key`` or produce, store and return a fresh one.

        A failing producer stores nothing; its exception reaches every caller
        waiting on that flight and the next call retries.
        """
        entry = self._live_entry(key)
        if entry is not None:
            self.hits += 1
            return entry.value

        task = self._inflight.get(key)
        if task is None:
            self.misses += 1
            logger.debug("Cache miss key={}", key)
            task = asyncio.ensure_future(self._fetch(key, ttl, producer))
            task.add_done_callback(_consume_task_exception)
            self._inflight[key] = task
        else:
            logger.debug("Cache joined in-flight fetch key={}", key)
        # Shielded so one cancelled caller does not abort the flight for the others.
        return await asyncio.shield(task)

    async def _fetch(self, key: str, ttl: float | None, producer: Producer) -> Any:
        try:
            value = producer()
            if inspect.isawaitable(value):
                value = await value
            self.set(key, value, ttl)
            return value
        finally:
            self._inflight.pop(key, None)


def _consume_task_exception(task: asyncio.Task[Any]) -> None:
    if not task.cancelled():
        task.exception()
