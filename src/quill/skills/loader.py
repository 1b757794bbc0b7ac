"""Custom slash command discovery from skill documents."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from quill.composer.registry import BUILTIN_COMMAND_NAMES
from quill.composer.types import CommandCategory, CommandDefinition, CommandHandler, CommandSource
from quill.skills.frontmatter import parse_skill_frontmatter

SKILLS_DIR = Path(".claude") / "skills"
LEGACY_COMMANDS_DIR = Path(".claude") / "commands"
SKILL_FILE_NAME = "SKILL.md"
LEGACY_COMMAND_SUFFIX = ".md"
SKILL_SOURCES = ("project", "user", "legacy")
CUSTOM_MAX_ARGS = 64
_INVALID_NAME_CHARS_RE = re.compile(r"[^a-z0-9_-]+")
_REPEATED_DASH_RE = re.compile(r"-+")


@dataclass(frozen=True)
class SkillCandidate:
    """One markdown document that may define a custom command."""

    name: str
    markdown_path: Path
    source: str


def normalize_command_name(raw_name: str) -> str:
    """Lower-case a name and collapse everything outside `[a-z0-9_-]` into single dashes."""

    name = _INVALID_NAME_CHARS_RE.sub("-", raw_name.strip().lower())
    name = _REPEATED_DASH_RE.sub("-", name)
    return name.strip("-")


def discover_skill_commands(workspace_path: Path, *, home: Path | None = None) -> list[CommandDefinition]:
    """Discover custom commands from project skills, user skills and legacy commands, in that order."""

    commands: dict[str, CommandDefinition] = {}
    for candidate in discover_skill_candidates(workspace_path, home=home):
        if candidate.name in commands:
            continue
        definition = _read_command(candidate)
        if definition is None or definition.name in commands:
            continue
        commands[definition.name] = definition

    logger.debug("skills.discover workspace={} commands={}", workspace_path, len(commands))
    return list(commands.values())


def discover_skill_candidates(workspace_path: Path, *, home: Path | None = None) -> list[SkillCandidate]:
    candidates: list[SkillCandidate] = []
    for root, source in _iter_skill_roots(workspace_path, home or Path.home()):
        if source == "legacy":
            candidates.extend(_legacy_command_files(root))
        else:
            candidates.extend(_skill_markdown_files(root, source=source))
    return candidates


def to_command_definition(name: str, description: str | None = None) -> CommandDefinition:
    return CommandDefinition(
        name=name,
        syntax=f"/{name} [args]",
        description=description or f'Run custom skill "{name}".',
        category=CommandCategory.CUSTOM,
        handler=CommandHandler.CUSTOM,
        min_args=0,
        max_args=CUSTOM_MAX_ARGS,
        allow_flags=True,
        source=CommandSource.SKILL,
    )


def _read_command(candidate: SkillCandidate) -> CommandDefinition | None:
    try:
        content = candidate.markdown_path.read_text(encoding="utf-8")
    except (OSError, UnicodeError) as exc:
        logger.debug("skills.read.skip path={} error={}", candidate.markdown_path, exc)
        return None

    metadata = parse_skill_frontmatter(content)
    name = normalize_command_name(metadata.name or candidate.name)
    if not name or name in BUILTIN_COMMAND_NAMES:
        return None
    return to_command_definition(name, metadata.description)


def _list_directory(root: Path) -> list[Path]:
    try:
        return sorted(root.iterdir())
    except OSError:
        return []


def _skill_markdown_files(root: Path, *, source: str) -> list[SkillCandidate]:
    candidates: list[SkillCandidate] = []
    for skill_dir in _list_directory(root):
        if not skill_dir.is_dir():
            continue
        name = normalize_command_name(skill_dir.name)
        if not name:
            continue
        candidates.append(SkillCandidate(name=name, markdown_path=skill_dir / SKILL_FILE_NAME, source=source))
    return candidates


def _legacy_command_files(root: Path) -> list[SkillCandidate]:
    candidates: list[SkillCandidate] = []
    for entry in _list_directory(root):
        if not entry.is_file() or not entry.name.lower().endswith(LEGACY_COMMAND_SUFFIX):
            continue
        name = normalize_command_name(entry.name[: -len(LEGACY_COMMAND_SUFFIX)])
        if not name:
            continue
        candidates.append(SkillCandidate(name=name, markdown_path=entry, source="legacy"))
    return candidates


def _iter_skill_roots(workspace_path: Path, home: Path) -> list[tuple[Path, str]]:
    roots: list[tuple[Path, str]] = []
    for source in SKILL_SOURCES:
        if source == "project":
            roots.append((workspace_path / SKILLS_DIR, source))
        elif source == "user":
            roots.append((home / SKILLS_DIR, source))
        elif source == "legacy":
            roots.append((workspace_path / LEGACY_COMMANDS_DIR, source))
    return roots
