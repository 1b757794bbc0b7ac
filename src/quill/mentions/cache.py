"""Per-workspace mention index cache with time-to-live and shared in-flight builds."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeAlias

from loguru import logger

from quill.composer.types import MentionSuggestion

DEFAULT_TTL_SECONDS = 10.0

IndexBuilder: TypeAlias = Callable[[], Awaitable[list[MentionSuggestion]]]


@dataclass(frozen=True)
class IndexEntry:
    workspace_path: str
    entries: list[MentionSuggestion]
    built_at: float


class MentionIndexCache:
    """Owns the index map and the in-flight build map for every provider kind.

    Entries are keyed by `(kind, workspace_id)`. An entry is reused only while it
    is younger than the TTL and was built for the same workspace path. Concurrent
    callers missing the cache for the same key await one shared build.
    """

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS, *, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[tuple[str, str], IndexEntry] = {}
        self._in_flight: dict[tuple[str, str, str], asyncio.Future[list[MentionSuggestion]]] = {}

    def peek(self, kind: str, workspace_id: str, workspace_path: str) -> list[MentionSuggestion] | None:
        entry = self._entries.get((kind, workspace_id))
        if entry is None or entry.workspace_path != workspace_path:
            return None
        if self._clock() - entry.built_at >= self.ttl_seconds:
            return None
        return entry.entries

    async def get_or_build(
        self, kind: str, workspace_id: str, workspace_path: str, build: IndexBuilder
    ) -> list[MentionSuggestion]:
        cached = self.peek(kind, workspace_id, workspace_path)
        if cached is not None:
            return cached

        key = (kind, workspace_id, workspace_path)
        future = self._in_flight.get(key)
        if future is None:
            logger.debug("mention.index.miss kind={} workspace_id={}", kind, workspace_id)
            future = asyncio.ensure_future(self._build(kind, workspace_id, workspace_path, build))
            self._in_flight[key] = future
            future.add_done_callback(lambda done: self._forget(key, done))
        return await asyncio.shield(future)

    def invalidate(self, workspace_id: str | None = None) -> None:
        if workspace_id is None:
            self._entries.clear()
            return
        for key in [key for key in self._entries if key[1] == workspace_id]:
            del self._entries[key]

    def in_flight_count(self) -> int:
        return len(self._in_flight)

    async def _build(
        self, kind: str, workspace_id: str, workspace_path: str, build: IndexBuilder
    ) -> list[MentionSuggestion]:
        entries = await build()
        self._entries[(kind, workspace_id)] = IndexEntry(
            workspace_path=workspace_path, entries=entries, built_at=self._clock()
        )
        logger.debug("mention.index.build kind={} workspace_id={} entries={}", kind, workspace_id, len(entries))
        return entries

    def _forget(self, key: tuple[str, str, str], done: asyncio.Future[list[MentionSuggestion]]) -> None:
        if self._in_flight.get(key) is done:
            del self._in_flight[key]
