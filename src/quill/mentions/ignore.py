"""Workspace `.gitignore` matching for the file index."""

from __future__ import annotations

import re
from dataclasses import dataclass

COMMENT_PREFIX = "#"
NEGATION_PREFIX = "!"


@dataclass(frozen=True)
class IgnoreRule:
    pattern: str
    regex: re.Pattern[str]
    negated: bool
    directory_only: bool
    anchored: bool


def translate_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a gitignore glob; `*` and `?` never cross a `/`, `**` does."""

    parts: list[str] = []
    index = 0
    while index < len(pattern):
        if pattern.startswith("**/", index):
            parts.append("(?:.*/)?")
            index += 3
            continue
        if pattern.startswith("**", index):
            parts.append(".*")
            index += 2
            continue

        char = pattern[index]
        if char == "*":
            parts.append("[^/]*")
        elif char == "?":
            parts.append("[^/]")
        elif char == "[":
            end = pattern.find("]", index + 1)
            if end == -1:
                parts.append(re.escape(char))
            else:
                body = pattern[index + 1 : end]
                if body.startswith("!"):
                    body = "^" + body[1:]
                parts.append(f"[{body}]")
                index = end + 1
                continue
        else:
            parts.append(re.escape(char))
        index += 1
    return re.compile("".join(parts) + r"\Z")


def parse_rule(line: str) -> IgnoreRule | None:
    text = line.rstrip()
    if not text or text.startswith(COMMENT_PREFIX):
        return None

    negated = text.startswith(NEGATION_PREFIX)
    if negated:
        text = text[1:]
    elif text.startswith("\\"):
        text = text[1:]

    directory_only = text.endswith("/")
    text = text.rstrip("/")
    anchored = "/" in text
    text = text.lstrip("/")
    if not text:
        return None

    return IgnoreRule(
        pattern=text,
        regex=translate_pattern(text),
        negated=negated,
        directory_only=directory_only,
        anchored=anchored,
    )


class GitignoreMatcher:
    """Root `.gitignore` rules evaluated in order; the last matching rule wins.

    Paths are workspace-relative with `/` separators. Callers prune ignored
    directories, so a path is only checked after its parents were kept.
    """

    def __init__(self, rules: list[IgnoreRule]) -> None:
        self.rules = rules

    @classmethod
    def from_text(cls, text: str) -> GitignoreMatcher:
        rules = [rule for rule in (parse_rule(line) for line in text.splitlines()) if rule is not None]
        return cls(rules)

    def ignores(self, relative_path: str, is_dir: bool) -> bool:
        ignored = False
        name = relative_path.rsplit("/", 1)[-1]
        for rule in self.rules:
            if rule.directory_only and not is_dir:
                continue
            candidate = relative_path if rule.anchored else name
            if rule.regex.match(candidate):
                ignored = not rule.negated
        return ignored
