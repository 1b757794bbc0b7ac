"""Provider selection, merged suggestions and fallback resolution for @mentions."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal

from loguru import logger

from quill.composer.types import MentionRef, MentionSuggestion, MentionType
from quill.mentions.cache import MentionIndexCache
from quill.mentions.paths import (
    RELATIVE_PREFIXES,
    has_extension,
    is_image_path,
    is_path_inside_workspace,
    workspace_target,
)
from quill.mentions.providers import (
    DirectoryMentionProvider,
    FileMentionProvider,
    ImageMentionProvider,
    McpMentionProvider,
    MentionProvider,
    MentionProviderInput,
)
from quill.mentions.ranking import MAX_SUGGESTIONS, dedupe_suggestions, rank_suggestions

ResolveFailure = Literal["unresolved", "outside-workspace"]
FALLBACK_ORDER = (MentionType.FILE, MentionType.DIRECTORY, MentionType.IMAGE)


@dataclass(frozen=True)
class MentionResolution:
    mention: MentionRef | None
    reason: ResolveFailure | None = None


def infer_mention_type(query: str) -> MentionType:
    """Guess the primary mention type from the query shape alone."""

    if ":" in query and not query.startswith(RELATIVE_PREFIXES):
        return MentionType.MCP
    if query.endswith("/"):
        return MentionType.DIRECTORY
    if is_image_path(query):
        return MentionType.IMAGE
    return MentionType.FILE


def suggestion_plan(query: str) -> list[MentionType]:
    """Providers to consult for suggestions, primary first."""

    primary = infer_mention_type(query)
    if primary is MentionType.MCP:
        return [MentionType.MCP]
    if primary is MentionType.DIRECTORY:
        return [MentionType.DIRECTORY, MentionType.FILE]
    if primary is MentionType.IMAGE:
        return [MentionType.IMAGE, MentionType.FILE]
    if has_extension(query):
        # A filename with an extension never names a directory.
        return [MentionType.FILE, MentionType.IMAGE]
    return [MentionType.FILE, MentionType.DIRECTORY, MentionType.IMAGE]


def resolution_order(primary: MentionType) -> list[MentionType]:
    if primary is MentionType.MCP:
        return [MentionType.MCP]
    return [primary, *(kind for kind in FALLBACK_ORDER if kind is not primary)]


class MentionCoordinator:
    """Dispatches mention queries to the providers registered per mention type."""

    def __init__(self, providers: Mapping[MentionType, MentionProvider]) -> None:
        missing = set(MentionType) - set(providers)
        if missing:
            raise ValueError(f"Missing mention providers: {sorted(missing)}")
        self._providers = dict(providers)

    @classmethod
    def create(cls, cache: MentionIndexCache | None = None) -> MentionCoordinator:
        cache = cache or MentionIndexCache()
        files = FileMentionProvider(cache)
        return cls(
            {
                MentionType.FILE: files,
                MentionType.DIRECTORY: DirectoryMentionProvider(cache),
                MentionType.IMAGE: ImageMentionProvider(files),
                MentionType.MCP: McpMentionProvider(),
            }
        )

    async def suggest(self, workspace_id: str, workspace_path: str, query: str) -> list[MentionSuggestion]:
        params = MentionProviderInput(workspace_id=workspace_id, workspace_path=workspace_path, query=query)
        plan = suggestion_plan(query)
        results = await asyncio.gather(*(self._providers[kind].suggest(params) for kind in plan))
        merged = dedupe_suggestions(entry for batch in results for entry in batch)
        return rank_suggestions(merged, query, limit=MAX_SUGGESTIONS)

    async def resolve(
        self,
        workspace_id: str,
        workspace_path: str,
        query: str,
        mention_type: MentionType | None = None,
    ) -> MentionResolution:
        primary = mention_type or infer_mention_type(query)
        if primary is not MentionType.MCP:
            target = workspace_target(workspace_path, query)
            if not is_path_inside_workspace(workspace_path, target):
                logger.info("mention.resolve.outside workspace_id={} query={}", workspace_id, query)
                return MentionResolution(mention=None, reason="outside-workspace")

        params = MentionProviderInput(workspace_id=workspace_id, workspace_path=workspace_path, query=query)
        for kind in resolution_order(primary):
            mention = await self._providers[kind].resolve(params)
            if mention is not None:
                return MentionResolution(mention=mention)

        logger.info("mention.resolve.unresolved workspace_id={} query={}", workspace_id, query)
        return MentionResolution(mention=None, reason="unresolved")
