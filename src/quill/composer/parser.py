"""Parser for slash commands and @mention tokens in composer input."""

from __future__ import annotations

import re

from quill.composer.commands import has_flags, parse_command_args
from quill.composer.registry import CommandRegistry
from quill.composer.types import (
    CommandInvocation,
    ComposerDiagnostic,
    ComposerParseDraft,
    ComposerToken,
    DiagnosticCode,
    MentionQuery,
)

COMMAND_PREFIX = "/"
MENTION_RE = re.compile(r"@([A-Za-z0-9_./:-]+)")
MENTION_BOUNDARY_CHARS = frozenset("([{,")
FIRST_NON_SPACE_RE = re.compile(r"\S")
WHITESPACE_RE = re.compile(r"\s")


def parse_composer_input(raw_input: str, registry: CommandRegistry) -> ComposerParseDraft:
    """Parse raw composer input into command and mention draft structures."""

    diagnostics: list[ComposerDiagnostic] = []
    command = _parse_command(raw_input, registry, diagnostics)
    mention_queries = parse_mention_queries(raw_input)
    if command is not None:
        mention_queries = [mention for mention in mention_queries if mention.start >= command.end]

    return ComposerParseDraft(
        tokens=build_tokens(raw_input, command, mention_queries),
        command=command,
        mention_queries=mention_queries,
        diagnostics=diagnostics,
        normalized_prompt=raw_input.strip(),
    )


def is_mention_boundary(raw_input: str, at_index: int) -> bool:
    if at_index == 0:
        return True
    prev = raw_input[at_index - 1]
    return prev.isspace() or prev in MENTION_BOUNDARY_CHARS


def parse_mention_queries(raw_input: str) -> list[MentionQuery]:
    """Extract unresolved @mentions, skipping email-shaped text."""

    queries: list[MentionQuery] = []
    for match in MENTION_RE.finditer(raw_input):
        start = match.start()
        if not is_mention_boundary(raw_input, start):
            continue
        queries.append(MentionQuery(raw=match.group(0), query=match.group(1), start=start, end=match.end()))
    return queries


def build_tokens(
    raw_input: str, command: CommandInvocation | None, mentions: list[MentionQuery]
) -> list[ComposerToken]:
    """Merge command and mention spans into a gap-free token stream."""

    special: list[ComposerToken] = []
    if command is not None:
        special.append(ComposerToken(kind="command", raw=command.raw, start=command.start, end=command.end))
    special.extend(
        ComposerToken(kind="mention", raw=mention.raw, start=mention.start, end=mention.end) for mention in mentions
    )
    special.sort(key=lambda token: token.start)

    tokens: list[ComposerToken] = []
    cursor = 0
    for token in special:
        if token.start > cursor:
            tokens.append(ComposerToken(kind="text", raw=raw_input[cursor : token.start], start=cursor, end=token.start))
        tokens.append(token)
        cursor = token.end

    if cursor < len(raw_input):
        tokens.append(ComposerToken(kind="text", raw=raw_input[cursor:], start=cursor, end=len(raw_input)))
    return tokens


def _parse_command(
    raw_input: str, registry: CommandRegistry, diagnostics: list[ComposerDiagnostic]
) -> CommandInvocation | None:
    first = FIRST_NON_SPACE_RE.search(raw_input)
    if first is None or first.group(0) != COMMAND_PREFIX:
        return None

    start = first.start()
    tail = raw_input[start:]
    space = WHITESPACE_RE.search(tail)
    command_token = tail if space is None else tail[: space.start()]
    args_raw = "" if space is None else tail[space.start() + 1 :].strip()
    name = command_token[1:].lower()
    end = start + len(command_token)

    definition = registry.get(name)
    if definition is None:
        diagnostics.append(
            ComposerDiagnostic.error(DiagnosticCode.CMD_UNKNOWN, f'Unknown command "/{name}".', start, end)
        )
        return None

    args = parse_command_args(args_raw)
    if not definition.allow_flags and has_flags(args):
        diagnostics.append(
            ComposerDiagnostic.error(
                DiagnosticCode.CMD_UNSUPPORTED_FLAG,
                f'Command "/{definition.name}" does not support flags.',
                start,
                len(raw_input),
            )
        )
    elif not definition.min_args <= len(args) <= definition.max_args:
        diagnostics.append(
            ComposerDiagnostic.error(
                DiagnosticCode.CMD_INVALID_ARGS,
                f'Invalid arguments for "/{definition.name}". Expected syntax: {definition.syntax}.',
                start,
                len(raw_input),
            )
        )

    return CommandInvocation(name=definition.name, args=args, raw=command_token, start=start, end=end)
