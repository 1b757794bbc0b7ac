"""Composer protocol types for slash commands, mentions and execution results."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Literal

TokenKind = Literal["text", "command", "mention"]
SuggestContext = Literal["none", "command", "mention"]
DiagnosticSeverity = Literal["error", "warning"]
ExecutionProvider = Literal["local", "external-assistant"]
ExecutionAction = Literal["none", "clear"]


class CommandHandler(StrEnum):
    """Execution tier a command is routed to."""

    LOCAL = "local"
    CLI_PROXY = "cli-proxy"
    SESSION = "session"
    CUSTOM = "custom"


class CommandCategory(StrEnum):
    """Command grouping used by suggestions and help."""

    SESSION = "session"
    CONTEXT = "context"
    WORKFLOW = "workflow"
    CONFIG = "config"
    DIAGNOSTICS = "diagnostics"
    INTEGRATION = "integration"
    CUSTOM = "custom"


class CommandSource(StrEnum):
    BUILTIN = "builtin"
    SKILL = "skill"


class MentionType(StrEnum):
    FILE = "file"
    DIRECTORY = "directory"
    IMAGE = "image"
    MCP = "mcp"


class DiagnosticCode(StrEnum):
    """Closed set of composer diagnostic codes."""

    CMD_UNKNOWN = "CMD_UNKNOWN"
    CMD_INVALID_ARGS = "CMD_INVALID_ARGS"
    CMD_UNSUPPORTED_FLAG = "CMD_UNSUPPORTED_FLAG"
    MENTION_UNRESOLVED = "MENTION_UNRESOLVED"
    MENTION_OUTSIDE_WORKSPACE = "MENTION_OUTSIDE_WORKSPACE"
    PARSE_SYNTAX = "PARSE_SYNTAX"
    PROVIDER_UNAVAILABLE = "PROVIDER_UNAVAILABLE"
    PROVIDER_AUTH_REQUIRED = "PROVIDER_AUTH_REQUIRED"

    @property
    def blocking(self) -> bool:
        return self not in {DiagnosticCode.PROVIDER_UNAVAILABLE, DiagnosticCode.PROVIDER_AUTH_REQUIRED}


@dataclass(frozen=True)
class CommandDefinition:
    """Slash command metadata."""

    name: str
    syntax: str
    description: str
    category: CommandCategory
    handler: CommandHandler
    min_args: int = 0
    max_args: int = 0
    allow_flags: bool = False
    source: CommandSource = CommandSource.BUILTIN

    def __post_init__(self) -> None:
        if self.min_args < 0 or self.min_args > self.max_args:
            raise ValueError(f"{self.name}: invalid arity {self.min_args}..{self.max_args}")


@dataclass(frozen=True)
class CommandInvocation:
    """Parsed slash command at the start of composer input."""

    name: str
    args: list[str]
    raw: str
    start: int
    end: int


@dataclass(frozen=True)
class ComposerToken:
    kind: TokenKind
    raw: str
    start: int
    end: int


@dataclass(frozen=True)
class MentionQuery:
    """Unresolved `@query` occurrence."""

    raw: str
    query: str
    start: int
    end: int


@dataclass(frozen=True)
class MentionSuggestion:
    id: str
    display: str
    value: str
    absolute_path: str
    relative_path: str
    kind: Literal["mention"] = "mention"


@dataclass(frozen=True)
class CommandSuggestion:
    name: str
    syntax: str
    description: str
    category: CommandCategory
    handler: CommandHandler
    kind: Literal["command"] = "command"

    @classmethod
    def from_definition(cls, definition: CommandDefinition) -> CommandSuggestion:
        return cls(
            name=definition.name,
            syntax=definition.syntax,
            description=definition.description,
            category=definition.category,
            handler=definition.handler,
        )


@dataclass(frozen=True)
class MentionRef:
    """Resolved mention reference."""

    id: str
    type: MentionType
    workspace_id: str
    display: str
    absolute_path: str | None = None
    relative_path: str | None = None
    payload: dict[str, Any] | None = None


@dataclass(frozen=True)
class ComposerDiagnostic:
    """Structured parser or execution diagnostic attached to an input span."""

    code: DiagnosticCode
    severity: DiagnosticSeverity
    message: str
    start: int
    end: int
    blocking: bool

    @classmethod
    def error(cls, code: DiagnosticCode, message: str, start: int = 0, end: int = 0) -> ComposerDiagnostic:
        return cls(code=code, severity="error", message=message, start=start, end=end, blocking=code.blocking)


@dataclass(frozen=True)
class ComposerParseDraft:
    """Intermediate parse result before mention resolution."""

    tokens: list[ComposerToken]
    command: CommandInvocation | None
    mention_queries: list[MentionQuery]
    diagnostics: list[ComposerDiagnostic]
    normalized_prompt: str


@dataclass(frozen=True)
class ComposerParseResult:
    """Authoritative parse result consulted before any execution."""

    raw_input: str
    tokens: list[ComposerToken]
    command: CommandInvocation | None
    mentions: list[MentionRef]
    normalized_prompt: str
    diagnostics: list[ComposerDiagnostic]
    blocking: bool = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "blocking", any(diagnostic.blocking for diagnostic in self.diagnostics))


@dataclass(frozen=True)
class ComposerSuggestResult:
    context: SuggestContext
    query: str
    suggestions: list[CommandSuggestion] | list[MentionSuggestion] = field(default_factory=list)


@dataclass(frozen=True)
class ComposerExecutionResult:
    ok: bool
    provider: ExecutionProvider
    output: str = ""
    action: ExecutionAction = "none"
    model_override: str | None = None
    diagnostics: list[ComposerDiagnostic] = field(default_factory=list)

    @classmethod
    def failure(
        cls, code: DiagnosticCode, message: str, *, provider: ExecutionProvider = "external-assistant"
    ) -> ComposerExecutionResult:
        return cls(
            ok=False,
            provider=provider,
            output=message,
            diagnostics=[ComposerDiagnostic.error(code, message)],
        )


@dataclass
class ExecutionCallbacks:
    """Optional streaming callbacks; `end` must be reached exactly once per execution."""

    on_stream_chunk: Callable[[str], None] | None = None
    on_stream_end: Callable[[], None] | None = None
    _ended: bool = field(default=False, repr=False)

    def chunk(self, text: str) -> None:
        if self._ended or not text:
            return
        if self.on_stream_chunk is not None:
            self.on_stream_chunk(text)

    def end(self) -> None:
        if self._ended:
            return
        self._ended = True
        if self.on_stream_end is not None:
            self.on_stream_end()
