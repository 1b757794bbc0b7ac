"""Command argument scanning helpers."""

from __future__ import annotations

QUOTE_CHARS = ('"', "'")
FLAG_PREFIX = "-"


def parse_command_args(text: str) -> list[str]:
    """Split argument text on whitespace, honoring single and double quotes.

    Quote characters are consumed rather than echoed. An unterminated quote
    runs to the end of the input.
    """

    args: list[str] = []
    current: list[str] = []
    quote: str | None = None

    for ch in text:
        if quote is not None:
            if ch == quote:
                quote = None
                continue
            current.append(ch)
            continue

        if ch in QUOTE_CHARS:
            quote = ch
            continue

        if ch.isspace():
            if current:
                args.append("".join(current))
                current = []
            continue

        current.append(ch)

    if current:
        args.append("".join(current))
    return args


def has_flags(args: list[str]) -> bool:
    return any(arg.startswith(FLAG_PREFIX) for arg in args)
