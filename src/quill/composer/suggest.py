"""Cursor-context classification for composer autocomplete."""

from __future__ import annotations

import re
from dataclasses import dataclass

from quill.composer.types import SuggestContext

ACTIVE_MENTION_RE = re.compile(r"(?:^|\s)@([A-Za-z0-9_./:-]*)$")
ACTIVE_COMMAND_RE = re.compile(r"^\s*/([A-Za-z0-9_-]*)$")


@dataclass(frozen=True)
class CursorContext:
    context: SuggestContext
    query: str = ""


NO_CONTEXT = CursorContext(context="none")


def clamp_cursor(raw_input: str, cursor: int) -> int:
    return max(0, min(cursor, len(raw_input)))


def detect_cursor_context(raw_input: str, cursor: int) -> CursorContext:
    """Classify whether the cursor is completing a mention, a command name, or nothing."""

    prefix = raw_input[: clamp_cursor(raw_input, cursor)]
    mention = ACTIVE_MENTION_RE.search(prefix)
    if mention is not None:
        return CursorContext(context="mention", query=mention.group(1))

    command = ACTIVE_COMMAND_RE.match(prefix)
    if command is not None:
        return CursorContext(context="command", query=command.group(1))

    return NO_CONTEXT
