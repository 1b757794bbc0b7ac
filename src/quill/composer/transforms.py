"""Apply accepted suggestions back onto composer text."""

from __future__ import annotations

import re

from quill.composer.suggest import ACTIVE_MENTION_RE, clamp_cursor

LEADING_COMMAND_RE = re.compile(r"^\s*/\S*")


def apply_command_suggestion(raw_input: str, name: str, cursor: int) -> tuple[str, int]:
    """Replace the leading `/token` with `/name`, always leaving one space after it."""

    _ = cursor
    match = LEADING_COMMAND_RE.match(raw_input)
    if match is None:
        start = end = 0
    else:
        start = match.start() + match.group(0).index("/")
        end = match.end()

    trailing = raw_input[end:].lstrip()
    insert = f"/{name}"
    value = f"{raw_input[:start]}{insert} {trailing}"
    return value, start + len(insert) + 1


def apply_mention_suggestion(raw_input: str, value: str, cursor: int) -> tuple[str, int]:
    """Replace only the `@token` that ends at the cursor."""

    cursor = clamp_cursor(raw_input, cursor)
    match = ACTIVE_MENTION_RE.search(raw_input[:cursor])
    if match is None:
        return raw_input, cursor

    start = match.start() + match.group(0).rindex("@")
    insert = f"@{value}"
    return f"{raw_input[:start]}{insert}{raw_input[cursor:]}", start + len(insert)
