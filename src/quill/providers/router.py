"""Routing of validated composer requests to local handlers or the external assistant."""

from __future__ import annotations

from dataclasses import dataclass
from typing import assert_never

from loguru import logger

from quill.composer.registry import CommandRegistry
from quill.composer.types import (
    CommandDefinition,
    CommandHandler,
    CommandInvocation,
    ComposerExecutionResult,
    ComposerParseResult,
    DiagnosticCode,
    ExecutionCallbacks,
)
from quill.providers.assistant import AssistantBridge, AssistantRequest
from quill.providers.prompt import build_prompt

LOCAL_COMMANDS = ("help", "clear", "model", "theme", "vim", "copy", "exit")


@dataclass(frozen=True)
class ExecutionRequest:
    """Provider execution request after the authoritative parse."""

    workspace_id: str
    workspace_path: str
    thread_id: str | None
    parse_result: ComposerParseResult
    model_override: str | None = None


class ExecutionRouter:
    """Maps a parse result to a handler tier and runs it."""

    def __init__(self, registry: CommandRegistry, bridge: AssistantBridge) -> None:
        self._registry = registry
        self._bridge = bridge

    async def execute(
        self, request: ExecutionRequest, callbacks: ExecutionCallbacks | None = None
    ) -> ComposerExecutionResult:
        callbacks = callbacks or ExecutionCallbacks()
        try:
            return await self._route(request, callbacks)
        finally:
            callbacks.end()

    async def _route(self, request: ExecutionRequest, callbacks: ExecutionCallbacks) -> ComposerExecutionResult:
        command = request.parse_result.command
        if command is None:
            return await self._forward(request, None, callbacks)

        if command.name in LOCAL_COMMANDS:
            return self._execute_local(command)

        definition = self._registry.get(command.name)
        if definition is None:
            return await self._forward(request, None, callbacks)

        match definition.handler:
            case CommandHandler.LOCAL:
                return ComposerExecutionResult(
                    ok=True, provider="local", output=f'Handled local command "/{command.name}".'
                )
            case CommandHandler.CLI_PROXY | CommandHandler.SESSION | CommandHandler.CUSTOM:
                return await self._forward(request, definition, callbacks)
            case _:
                assert_never(definition.handler)

    def _execute_local(self, command: CommandInvocation) -> ComposerExecutionResult:
        logger.info("composer.local command={}", command.name)
        match command.name:
            case "help":
                return ComposerExecutionResult(ok=True, provider="local", output=self.render_help())
            case "clear":
                return ComposerExecutionResult(ok=True, provider="local", output="", action="clear")
            case "model":
                model = command.args[0] if command.args else None
                if model is None:
                    return ComposerExecutionResult.failure(
                        DiagnosticCode.CMD_INVALID_ARGS, 'Invalid arguments for "/model".', provider="local"
                    )
                return ComposerExecutionResult(
                    ok=True, provider="local", output=f"Model override set to {model}.", model_override=model
                )
            case _:
                return ComposerExecutionResult(
                    ok=True, provider="local", output=f'Handled local command "/{command.name}".'
                )

    def render_help(self) -> str:
        syntaxes: list[str] = []
        for name in LOCAL_COMMANDS:
            definition = self._registry.get(name)
            syntaxes.append(definition.syntax if definition is not None else f"/{name}")
        return ", ".join(syntaxes)

    async def _forward(
        self,
        request: ExecutionRequest,
        definition: CommandDefinition | None,
        callbacks: ExecutionCallbacks,
    ) -> ComposerExecutionResult:
        prompt = build_prompt(request.parse_result, definition)
        if not prompt:
            return ComposerExecutionResult.failure(
                DiagnosticCode.PROVIDER_UNAVAILABLE, "Composer prompt is empty after normalization."
            )

        result = await self._bridge.run(
            AssistantRequest(cwd=request.workspace_path, prompt=prompt, model_override=request.model_override)
        )
        if result.ok:
            callbacks.chunk(result.output)
        return result
