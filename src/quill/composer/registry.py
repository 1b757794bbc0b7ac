"""Slash command registry for composer parsing and suggestions."""

from __future__ import annotations

import builtins
from collections.abc import Iterable

from loguru import logger

from quill.composer.types import CommandCategory, CommandDefinition, CommandHandler

_S = CommandCategory.SESSION
_C = CommandCategory.CONTEXT
_W = CommandCategory.WORKFLOW
_G = CommandCategory.CONFIG
_D = CommandCategory.DIAGNOSTICS
_I = CommandCategory.INTEGRATION

LOCAL = CommandHandler.LOCAL
PROXY = CommandHandler.CLI_PROXY
SESSION = CommandHandler.SESSION


def _builtin(
    name: str,
    syntax: str,
    description: str,
    category: CommandCategory,
    handler: CommandHandler,
    min_args: int = 0,
    max_args: int = 0,
    *,
    allow_flags: bool = False,
) -> CommandDefinition:
    return CommandDefinition(
        name=name,
        syntax=syntax,
        description=description,
        category=category,
        handler=handler,
        min_args=min_args,
        max_args=max_args,
        allow_flags=allow_flags,
    )


BUILTIN_COMMANDS: tuple[CommandDefinition, ...] = (
    # session
    _builtin("help", "/help", "Show supported slash commands and usage.", _S, LOCAL),
    _builtin("clear", "/clear", "Clear the current composer draft context.", _S, LOCAL),
    _builtin("compact", "/compact [instructions]", "Request concise output style.", _S, PROXY, 0, 16),
    _builtin("resume", "/resume [thread]", "Resume a previous conversation thread.", _S, SESSION, 0, 1),
    _builtin("rewind", "/rewind [steps]", "Rewind the conversation to an earlier point.", _S, SESSION, 0, 1),
    _builtin("rename", "/rename <title>", "Rename the current conversation thread.", _S, SESSION, 1, 16),
    _builtin("export", "/export [path]", "Export the current conversation.", _S, SESSION, 0, 1),
    _builtin("copy", "/copy", "Copy the last response to the clipboard.", _S, LOCAL),
    _builtin("exit", "/exit", "Close the current session.", _S, LOCAL),
    # context
    _builtin("context", "/context", "Summarize what is currently in context.", _C, PROXY),
    _builtin("memory", "/memory [note]", "Review or extend project memory.", _C, PROXY, 0, 64),
    _builtin("init", "/init", "Bootstrap a project memory document for this workspace.", _C, PROXY),
    _builtin("add-dir", "/add-dir <path>", "Add a working directory to the session.", _C, SESSION, 1, 1),
    # workflow
    _builtin("review", "/review", "Switch to review-oriented response behavior.", _W, PROXY),
    _builtin("plan", "/plan", "Switch to planning-oriented response behavior.", _W, PROXY),
    _builtin("status", "/status", "Request current workspace status behavior.", _W, PROXY),
    _builtin("diff", "/diff [target]", "Request diff-focused behavior for optional target path.", _W, PROXY, 0, 1),
    _builtin("test", "/test [scope]", "Request test-focused behavior for optional scope.", _W, PROXY, 0, 1),
    _builtin("todos", "/todos", "List outstanding todo items.", _W, PROXY),
    _builtin("tasks", "/tasks", "List background tasks.", _W, PROXY),
    # config
    _builtin("model", "/model <model>", "Override the assistant model for subsequent requests.", _G, LOCAL, 1, 1),
    _builtin("config", "/config [key] [value]", "Inspect or change assistant configuration.", _G, PROXY, 0, 2),
    _builtin("permissions", "/permissions", "Review tool permission rules.", _G, PROXY),
    _builtin("theme", "/theme [name]", "Switch the interface theme.", _G, LOCAL, 0, 1),
    _builtin("vim", "/vim [on|off]", "Toggle vim key bindings in the composer.", _G, LOCAL, 0, 1),
    # diagnostics
    _builtin("debug", "/debug [topic]", "Diagnose a problem in the current session.", _D, PROXY, 0, 64),
    _builtin("cost", "/cost", "Show token cost for the current session.", _D, PROXY),
    _builtin("usage", "/usage", "Show plan usage limits.", _D, PROXY),
    _builtin("stats", "/stats", "Show usage statistics.", _D, PROXY),
    _builtin("doctor", "/doctor", "Check the health of the assistant installation.", _D, PROXY),
    _builtin("bug", "/bug [description]", "Report a bug with the current session.", _D, PROXY, 0, 64),
    # integration
    _builtin("mcp", "/mcp [server]", "Inspect configured MCP servers.", _I, PROXY, 0, 1, allow_flags=True),
)

BUILTIN_COMMAND_NAMES: frozenset[str] = frozenset(definition.name for definition in BUILTIN_COMMANDS)


class CommandRegistry:
    """Built-in command catalogue plus a replaceable set of custom commands."""

    def __init__(self, builtin_commands: Iterable[CommandDefinition] = BUILTIN_COMMANDS) -> None:
        self._builtins: dict[str, CommandDefinition] = {}
        for definition in builtin_commands:
            if definition.name in self._builtins:
                raise ValueError(f"Duplicate built-in command: {definition.name}")
            self._builtins[definition.name] = definition
        self._custom: dict[str, CommandDefinition] = {}

    def get(self, name: str) -> CommandDefinition | None:
        return self._builtins.get(name) or self._custom.get(name)

    def has(self, name: str) -> bool:
        return self.get(name) is not None

    def list(self) -> builtins.list[CommandDefinition]:
        return [*self._builtins.values(), *self._custom.values()]

    def custom_commands(self) -> builtins.list[CommandDefinition]:
        return list(self._custom.values())

    def set_custom_commands(self, definitions: Iterable[CommandDefinition]) -> None:
        """Replace the custom command set in one swap; built-in names always win."""

        replacement: dict[str, CommandDefinition] = {}
        for definition in definitions:
            if definition.name in self._builtins or definition.name in replacement:
                continue
            replacement[definition.name] = definition
        self._custom = replacement
        logger.debug("command.registry.custom count={}", len(replacement))
