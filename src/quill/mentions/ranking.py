"""Mention suggestion ranking."""

from __future__ import annotations

from collections.abc import Iterable

from quill.composer.types import MentionSuggestion

MAX_SUGGESTIONS = 20


def rank_suggestions(
    entries: Iterable[MentionSuggestion], query: str, *, limit: int = MAX_SUGGESTIONS
) -> list[MentionSuggestion]:
    """Order prefix matches before substring matches, case-insensitively, then cap."""

    if not query:
        return list(entries)[:limit]

    normalized = query.lower()
    starts_with: list[MentionSuggestion] = []
    contains: list[MentionSuggestion] = []
    for entry in entries:
        relative = entry.relative_path.lower()
        if relative.startswith(normalized):
            starts_with.append(entry)
        elif normalized in relative:
            contains.append(entry)
    return [*starts_with, *contains][:limit]


def dedupe_suggestions(entries: Iterable[MentionSuggestion]) -> list[MentionSuggestion]:
    seen: set[tuple[str, str]] = set()
    unique: list[MentionSuggestion] = []
    for entry in entries:
        key = (entry.id, entry.value)
        if key in seen:
            continue
        seen.add(key)
        unique.append(entry)
    return unique


def best_match(candidates: list[MentionSuggestion], relative_path: str) -> MentionSuggestion | None:
    """Prefer an exact (case-insensitive) relative path match, else the top-ranked candidate."""

    lowered = relative_path.lower()
    for candidate in candidates:
        if candidate.relative_path.lower() == lowered:
            return candidate
    return candidates[0] if candidates else None
