"""Composer service: suggestions, authoritative parse and execution."""

from __future__ import annotations

import asyncio
from pathlib import Path

from loguru import logger

from quill.composer.parser import parse_composer_input
from quill.composer.registry import CommandRegistry
from quill.composer.requests import PrepareRequest, SuggestRequest
from quill.composer.suggest import detect_cursor_context
from quill.composer.types import (
    CommandSuggestion,
    ComposerDiagnostic,
    ComposerExecutionResult,
    ComposerParseResult,
    ComposerSuggestResult,
    DiagnosticCode,
    ExecutionCallbacks,
    MentionQuery,
    MentionRef,
)
from quill.config import Settings
from quill.mentions.cache import MentionIndexCache
from quill.mentions.coordinator import MentionCoordinator
from quill.providers.assistant import AssistantBridge, ClaudeCliBridge
from quill.providers.router import ExecutionRequest, ExecutionRouter
from quill.skills.loader import discover_skill_commands
from quill.workspace import WorkspaceResolver, YamlWorkspaceResolver


class ComposerService:
    """Entry point for the UI layer.

    `suggest` is advisory; only `prepare` decides whether input may run, and
    `execute` always re-prepares before routing.
    """

    def __init__(
        self,
        resolver: WorkspaceResolver,
        bridge: AssistantBridge,
        *,
        registry: CommandRegistry | None = None,
        coordinator: MentionCoordinator | None = None,
        skills_home: Path | None = None,
    ) -> None:
        self.resolver = resolver
        self.registry = registry or CommandRegistry()
        self.coordinator = coordinator or MentionCoordinator.create()
        self.router = ExecutionRouter(self.registry, bridge)
        self._skills_home = skills_home

    @classmethod
    def from_settings(cls, settings: Settings, resolver: WorkspaceResolver | None = None) -> ComposerService:
        return cls(
            resolver or YamlWorkspaceResolver(settings.resolve_workspaces_file()),
            ClaudeCliBridge(settings.assistant_command, timeout_seconds=settings.assistant_timeout_seconds),
            coordinator=MentionCoordinator.create(MentionIndexCache(settings.index_ttl_seconds)),
        )

    async def suggest(self, request: SuggestRequest) -> ComposerSuggestResult:
        context = detect_cursor_context(request.raw_input, request.cursor)
        if context.context == "none":
            return ComposerSuggestResult(context="none", query="")

        workspace_path = await self.resolver.get_workspace_path_by_id(request.workspace_id)
        if context.context == "command":
            await self.refresh_custom_commands(workspace_path)
            return ComposerSuggestResult(
                context="command", query=context.query, suggestions=self.command_suggestions(context.query)
            )

        if workspace_path is None:
            return ComposerSuggestResult(context="mention", query=context.query)
        suggestions = await self.coordinator.suggest(request.workspace_id, str(workspace_path), context.query)
        return ComposerSuggestResult(context="mention", query=context.query, suggestions=suggestions)

    def command_suggestions(self, query: str) -> list[CommandSuggestion]:
        normalized = query.lower()
        return [
            CommandSuggestion.from_definition(definition)
            for definition in self.registry.list()
            if definition.name.startswith(normalized)
        ]

    async def refresh_custom_commands(self, workspace_path: Path | None) -> None:
        if workspace_path is None:
            self.registry.set_custom_commands([])
            return
        try:
            commands = await asyncio.to_thread(discover_skill_commands, workspace_path, home=self._skills_home)
        except OSError as exc:
            logger.warning("skills.discover.error workspace={} error={}", workspace_path, exc)
            self.registry.set_custom_commands([])
            return
        self.registry.set_custom_commands(commands)

    async def prepare(self, request: PrepareRequest) -> ComposerParseResult:
        parse_result, _ = await self._prepare(request)
        return parse_result

    async def _prepare(self, request: PrepareRequest) -> tuple[ComposerParseResult, Path | None]:
        workspace_path = await self.resolver.get_workspace_path_by_id(request.workspace_id)
        await self.refresh_custom_commands(workspace_path)

        draft = parse_composer_input(request.raw_input, self.registry)
        diagnostics = list(draft.diagnostics)
        mentions: list[MentionRef] = []

        if workspace_path is None:
            diagnostics.append(
                ComposerDiagnostic.error(
                    DiagnosticCode.PARSE_SYNTAX,
                    "No active workspace was found for this composer action.",
                    0,
                    len(request.raw_input),
                )
            )
        else:
            mentions, mention_diagnostics = await self._resolve_mentions(
                request.workspace_id, str(workspace_path), draft.mention_queries
            )
            diagnostics.extend(mention_diagnostics)

        parse_result = ComposerParseResult(
            raw_input=request.raw_input,
            tokens=draft.tokens,
            command=draft.command,
            mentions=mentions,
            normalized_prompt=draft.normalized_prompt,
            diagnostics=diagnostics,
        )
        return parse_result, workspace_path

    async def execute(
        self, request: PrepareRequest, callbacks: ExecutionCallbacks | None = None
    ) -> ComposerExecutionResult:
        callbacks = callbacks or ExecutionCallbacks()
        try:
            parse_result, workspace_path = await self._prepare(request)
            if parse_result.blocking:
                first = next(diagnostic for diagnostic in parse_result.diagnostics if diagnostic.blocking)
                logger.info("composer.execute.blocked code={} workspace_id={}", first.code, request.workspace_id)
                return ComposerExecutionResult(
                    ok=False, provider="local", output=first.message, diagnostics=parse_result.diagnostics
                )

            return await self.router.execute(
                ExecutionRequest(
                    workspace_id=request.workspace_id,
                    workspace_path=str(workspace_path),
                    thread_id=request.thread_id,
                    parse_result=parse_result,
                    model_override=request.model_override,
                ),
                callbacks,
            )
        finally:
            callbacks.end()

    async def _resolve_mentions(
        self, workspace_id: str, workspace_path: str, queries: list[MentionQuery]
    ) -> tuple[list[MentionRef], list[ComposerDiagnostic]]:
        mentions: list[MentionRef] = []
        diagnostics: list[ComposerDiagnostic] = []
        seen: set[str] = set()

        for query in queries:
            resolution = await self.coordinator.resolve(workspace_id, workspace_path, query.query)
            if resolution.mention is not None:
                if resolution.mention.id not in seen:
                    seen.add(resolution.mention.id)
                    mentions.append(resolution.mention)
                continue

            if resolution.reason == "outside-workspace":
                diagnostics.append(
                    ComposerDiagnostic.error(
                        DiagnosticCode.MENTION_OUTSIDE_WORKSPACE,
                        f'Mention "@{query.query}" is outside the current workspace.',
                        query.start,
                        query.end,
                    )
                )
                continue

            diagnostics.append(
                ComposerDiagnostic.error(
                    DiagnosticCode.MENTION_UNRESOLVED,
                    f'Unable to resolve mention "@{query.query}".',
                    query.start,
                    query.end,
                )
            )

        return mentions, diagnostics
