"""Mention providers: file, directory, image and remote (MCP) resources."""

from __future__ import annotations

import asyncio
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace

from quill.composer.types import MentionRef, MentionSuggestion, MentionType
from quill.mentions.cache import MentionIndexCache
from quill.mentions.paths import (
    is_image_path,
    is_path_inside_workspace,
    relative_to_workspace,
    strip_relative_prefix,
    workspace_target,
)
from quill.mentions.ranking import best_match, rank_suggestions
from quill.mentions.walk import load_gitignore, walk_workspace

MAX_INDEX_FILES = 8000
MAX_INDEX_DIRECTORIES = 4000
MCP_SEPARATOR = ":"


@dataclass(frozen=True)
class MentionProviderInput:
    workspace_id: str
    workspace_path: str
    query: str


def mention_id(workspace_id: str, kind: MentionType, value: str) -> str:
    return f"{workspace_id}:{kind}:{value}"


class MentionProvider(ABC):
    """Indexer and resolver for one mention type."""

    kind: MentionType

    @abstractmethod
    async def suggest(self, params: MentionProviderInput) -> list[MentionSuggestion]:
        """Return ranked suggestions for a partial query."""

    @abstractmethod
    async def resolve(self, params: MentionProviderInput) -> MentionRef | None:
        """Resolve a query to a stable reference, or None."""


def _is_file(path: str) -> bool:
    return os.path.isfile(path)


def _is_dir(path: str) -> bool:
    return os.path.isdir(path)


class FileMentionProvider(MentionProvider):
    kind = MentionType.FILE

    def __init__(self, cache: MentionIndexCache, *, max_entries: int = MAX_INDEX_FILES) -> None:
        self._cache = cache
        self._max_entries = max_entries

    async def index(self, workspace_id: str, workspace_path: str) -> list[MentionSuggestion]:
        return await self._cache.get_or_build(
            self.kind, workspace_id, workspace_path, lambda: self._build_index(workspace_id, workspace_path)
        )

    async def _build_index(self, workspace_id: str, workspace_path: str) -> list[MentionSuggestion]:
        matcher = await load_gitignore(workspace_path)
        walked = await walk_workspace(
            workspace_path,
            include_files=True,
            include_dirs=False,
            limit=self._max_entries,
            ignores=matcher.ignores if matcher is not None else None,
        )
        return [
            MentionSuggestion(
                id=mention_id(workspace_id, self.kind, entry.relative_path),
                display=entry.relative_path,
                value=entry.relative_path,
                absolute_path=entry.absolute_path,
                relative_path=entry.relative_path,
            )
            for entry in walked
        ]

    async def suggest(self, params: MentionProviderInput) -> list[MentionSuggestion]:
        if MCP_SEPARATOR in params.query:
            return []
        entries = await self.index(params.workspace_id, params.workspace_path)
        return rank_suggestions(entries, params.query)

    async def resolve(self, params: MentionProviderInput) -> MentionRef | None:
        if MCP_SEPARATOR in params.query:
            return None

        target = workspace_target(params.workspace_path, params.query)
        if not is_path_inside_workspace(params.workspace_path, target):
            return None

        if await asyncio.to_thread(_is_file, target):
            relative_path = relative_to_workspace(params.workspace_path, target)
            return MentionRef(
                id=mention_id(params.workspace_id, self.kind, relative_path),
                type=self.kind,
                workspace_id=params.workspace_id,
                absolute_path=target,
                relative_path=relative_path,
                display=relative_path,
            )

        if await asyncio.to_thread(_is_dir, target):
            return None

        normalized = strip_relative_prefix(params.query)
        best = best_match(await self.suggest(replace(params, query=normalized)), normalized)
        if best is None:
            return None
        return MentionRef(
            id=best.id,
            type=self.kind,
            workspace_id=params.workspace_id,
            absolute_path=best.absolute_path,
            relative_path=best.relative_path,
            display=best.display,
        )


class DirectoryMentionProvider(MentionProvider):
    """Directory mentions; prunes only the hard-ignored directories, never `.gitignore` entries."""

    kind = MentionType.DIRECTORY

    def __init__(self, cache: MentionIndexCache, *, max_entries: int = MAX_INDEX_DIRECTORIES) -> None:
        self._cache = cache
        self._max_entries = max_entries

    async def index(self, workspace_id: str, workspace_path: str) -> list[MentionSuggestion]:
        return await self._cache.get_or_build(
            self.kind, workspace_id, workspace_path, lambda: self._build_index(workspace_id, workspace_path)
        )

    async def _build_index(self, workspace_id: str, workspace_path: str) -> list[MentionSuggestion]:
        walked = await walk_workspace(workspace_path, include_files=False, include_dirs=True, limit=self._max_entries)
        entries: list[MentionSuggestion] = []
        for entry in walked:
            relative_path = f"{entry.relative_path}/"
            entries.append(
                MentionSuggestion(
                    id=mention_id(workspace_id, self.kind, relative_path),
                    display=relative_path,
                    value=relative_path,
                    absolute_path=entry.absolute_path,
                    relative_path=relative_path,
                )
            )
        return entries

    async def suggest(self, params: MentionProviderInput) -> list[MentionSuggestion]:
        entries = await self.index(params.workspace_id, params.workspace_path)
        return rank_suggestions(entries, params.query)

    async def resolve(self, params: MentionProviderInput) -> MentionRef | None:
        target = workspace_target(params.workspace_path, params.query)
        if not is_path_inside_workspace(params.workspace_path, target):
            return None

        if await asyncio.to_thread(_is_dir, target):
            relative_base = relative_to_workspace(params.workspace_path, target)
            relative_path = f"{relative_base}/" if relative_base else "./"
            return MentionRef(
                id=mention_id(params.workspace_id, self.kind, relative_path),
                type=self.kind,
                workspace_id=params.workspace_id,
                absolute_path=target,
                relative_path=relative_path,
                display=relative_path,
            )

        normalized = strip_relative_prefix(params.query).rstrip("/")
        best = best_match(await self.suggest(replace(params, query=normalized)), f"{normalized}/")
        if best is None:
            return None
        return MentionRef(
            id=best.id,
            type=self.kind,
            workspace_id=params.workspace_id,
            absolute_path=best.absolute_path,
            relative_path=best.relative_path,
            display=best.display,
        )


class ImageMentionProvider(MentionProvider):
    """Image mentions backed by the file index, filtered to image extensions."""

    kind = MentionType.IMAGE

    def __init__(self, files: FileMentionProvider) -> None:
        self._files = files

    async def suggest(self, params: MentionProviderInput) -> list[MentionSuggestion]:
        if MCP_SEPARATOR in params.query:
            return []
        entries = await self._files.index(params.workspace_id, params.workspace_path)
        images = [
            replace(entry, id=mention_id(params.workspace_id, self.kind, entry.relative_path))
            for entry in entries
            if is_image_path(entry.relative_path)
        ]
        return rank_suggestions(images, params.query)

    async def resolve(self, params: MentionProviderInput) -> MentionRef | None:
        direct = await self._files.resolve(params)
        if direct is not None and direct.relative_path and is_image_path(direct.relative_path):
            return replace(direct, id=mention_id(params.workspace_id, self.kind, direct.relative_path), type=self.kind)

        normalized = strip_relative_prefix(params.query)
        if not is_image_path(normalized):
            return None

        best = best_match(await self.suggest(replace(params, query=normalized)), normalized)
        if best is None:
            return None
        return MentionRef(
            id=best.id,
            type=self.kind,
            workspace_id=params.workspace_id,
            absolute_path=best.absolute_path,
            relative_path=best.relative_path,
            display=best.display,
        )


@dataclass(frozen=True)
class McpTarget:
    server: str
    resource: str

    @property
    def value(self) -> str:
        return f"{self.server}{MCP_SEPARATOR}{self.resource}"


def parse_mcp_query(query: str) -> McpTarget | None:
    """Split `server:resource`; both sides must be non-empty."""

    server, sep, resource = query.partition(MCP_SEPARATOR)
    server = server.strip()
    resource = resource.strip()
    if not sep or not server or not resource:
        return None
    return McpTarget(server=server, resource=resource)


class McpMentionProvider(MentionProvider):
    """Stateless remote-resource mentions; never touches the filesystem."""

    kind = MentionType.MCP

    async def suggest(self, params: MentionProviderInput) -> list[MentionSuggestion]:
        target = parse_mcp_query(params.query)
        if target is None:
            return []
        return [
            MentionSuggestion(
                id=mention_id(params.workspace_id, self.kind, target.value),
                display=target.value,
                value=target.value,
                absolute_path="",
                relative_path=target.value,
            )
        ]

    async def resolve(self, params: MentionProviderInput) -> MentionRef | None:
        target = parse_mcp_query(params.query)
        if target is None:
            return None
        return MentionRef(
            id=mention_id(params.workspace_id, self.kind, target.value),
            type=self.kind,
            workspace_id=params.workspace_id,
            display=target.value,
            payload={"server": target.server, "resource": target.resource},
        )
