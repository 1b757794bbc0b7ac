"""Workspace tree walking shared by the file and directory providers."""

from __future__ import annotations

import asyncio
import os
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from quill.mentions.ignore import GitignoreMatcher

HARD_IGNORED_DIRECTORIES = frozenset({".git", "node_modules"})
GITIGNORE_FILE_NAME = ".gitignore"


@dataclass(frozen=True)
class WalkEntry:
    absolute_path: str
    relative_path: str
    is_dir: bool


@dataclass(frozen=True)
class _Child:
    name: str
    is_dir: bool
    is_file: bool


def to_posix(value: str) -> str:
    return value.replace(os.sep, "/")


def _scan_directory(path: str) -> list[_Child]:
    with os.scandir(path) as iterator:
        children = [
            _Child(name=entry.name, is_dir=entry.is_dir(follow_symlinks=False), is_file=entry.is_file())
            for entry in iterator
        ]
    return sorted(children, key=lambda child: child.name)


async def read_directory(path: str) -> list[_Child]:
    """Read one directory off the event loop; unreadable directories contribute nothing."""

    try:
        return await asyncio.to_thread(_scan_directory, path)
    except OSError as exc:
        logger.debug("mention.walk.skip path={} error={}", path, exc)
        return []


def _read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8")


async def load_gitignore(workspace_path: str) -> GitignoreMatcher | None:
    gitignore = Path(workspace_path) / GITIGNORE_FILE_NAME
    try:
        text = await asyncio.to_thread(_read_text, gitignore)
    except (OSError, UnicodeError):
        return None
    return GitignoreMatcher.from_text(text)


async def walk_workspace(
    workspace_path: str,
    *,
    include_files: bool,
    include_dirs: bool,
    limit: int,
    ignores: Callable[[str, bool], bool] | None = None,
) -> list[WalkEntry]:
    """Walk the workspace with an explicit stack, stopping once `limit` entries are collected.

    `ignores(relative_path, is_dir)` prunes files and whole subtrees.
    """

    entries: list[WalkEntry] = []
    stack: list[str] = [workspace_path]

    while stack and len(entries) < limit:
        current = stack.pop()
        for child in await read_directory(current):
            absolute_path = os.path.join(current, child.name)
            relative_path = to_posix(os.path.relpath(absolute_path, workspace_path))
            if child.is_dir:
                if child.name in HARD_IGNORED_DIRECTORIES:
                    continue
                if ignores is not None and ignores(relative_path, True):
                    continue
                stack.append(absolute_path)
                if include_dirs:
                    entries.append(WalkEntry(absolute_path=absolute_path, relative_path=relative_path, is_dir=True))
            elif child.is_file and include_files:
                if ignores is not None and ignores(relative_path, False):
                    continue
                entries.append(WalkEntry(absolute_path=absolute_path, relative_path=relative_path, is_dir=False))
            else:
                continue

            if len(entries) >= limit:
                break

    return entries
