"""Workspace id to path resolution."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path

import yaml
from loguru import logger


class WorkspaceResolver(ABC):
    """Looks up the filesystem path for a workspace id."""

    @abstractmethod
    async def get_workspace_path_by_id(self, workspace_id: str) -> Path | None:
        """Return the workspace root, or None when the id is unknown."""


class StaticWorkspaceResolver(WorkspaceResolver):
    """In-memory workspace catalogue."""

    def __init__(self, workspaces: Mapping[str, Path | str] | None = None) -> None:
        self._workspaces = {key: Path(value) for key, value in (workspaces or {}).items()}

    def register(self, workspace_id: str, path: Path | str) -> None:
        self._workspaces[workspace_id] = Path(path)

    async def get_workspace_path_by_id(self, workspace_id: str) -> Path | None:
        return self._workspaces.get(workspace_id)


class YamlWorkspaceResolver(WorkspaceResolver):
    """Workspace catalogue stored as YAML.

    Accepts either a mapping of `id: path` or a list of `{id, path}` items.
    The file is re-read on every lookup so external edits are picked up.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    async def get_workspace_path_by_id(self, workspace_id: str) -> Path | None:
        catalogue = await asyncio.to_thread(load_workspace_catalogue, self.path)
        raw = catalogue.get(workspace_id)
        if raw is None:
            return None
        path = raw.expanduser()
        if not await asyncio.to_thread(path.is_dir):
            logger.warning("workspace.missing id={} path={}", workspace_id, path)
            return None
        return path


def load_workspace_catalogue(path: Path) -> dict[str, Path]:
    """Load one workspace catalogue file as a normalized mapping."""

    if not path.is_file():
        return {}
    try:
        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError):
        return {}

    if isinstance(payload, dict):
        return {str(key): Path(str(value)) for key, value in payload.items() if isinstance(value, str)}
    if isinstance(payload, list):
        catalogue: dict[str, Path] = {}
        for item in payload:
            if not isinstance(item, dict):
                continue
            workspace_id = item.get("id")
            workspace_path = item.get("path")
            if isinstance(workspace_id, str) and isinstance(workspace_path, str):
                catalogue.setdefault(workspace_id, Path(workspace_path))
        return catalogue
    return {}
