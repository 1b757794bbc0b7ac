"""Composer input model: tokens, commands, mentions and diagnostics."""

from .parser import parse_composer_input
from .registry import BUILTIN_COMMANDS, CommandRegistry
from .types import (
    CommandDefinition,
    ComposerDiagnostic,
    ComposerExecutionResult,
    ComposerParseResult,
    DiagnosticCode,
    ExecutionCallbacks,
    MentionRef,
    MentionType,
)

__all__ = [
    "BUILTIN_COMMANDS",
    "CommandDefinition",
    "CommandRegistry",
    "ComposerDiagnostic",
    "ComposerExecutionResult",
    "ComposerParseResult",
    "DiagnosticCode",
    "ExecutionCallbacks",
    "MentionRef",
    "MentionType",
    "parse_composer_input",
]
