"""Workspace-relative path helpers for mention resolution."""

from __future__ import annotations

import os
import re

from quill.mentions.walk import to_posix

_LEADING_RELATIVE_RE = re.compile(r"^\.?/")
IMAGE_EXTENSION_RE = re.compile(r"\.(png|jpe?g|gif|svg|webp)$", re.IGNORECASE)
_EXTENSION_RE = re.compile(r"\.[A-Za-z0-9]+$")
RELATIVE_PREFIXES = ("./", "../")


def strip_relative_prefix(query: str) -> str:
    return _LEADING_RELATIVE_RE.sub("", query)


def workspace_target(workspace_path: str, query: str) -> str:
    """Absolute, normalized path a query points at; does not touch the filesystem."""

    return os.path.normpath(os.path.join(os.path.abspath(workspace_path), strip_relative_prefix(query)))


def is_path_inside_workspace(workspace_path: str, candidate: str) -> bool:
    root = os.path.normpath(os.path.abspath(workspace_path))
    relative = os.path.relpath(candidate, root)
    if os.path.isabs(relative):
        return False
    return relative != os.pardir and not relative.startswith(os.pardir + os.sep)


def relative_to_workspace(workspace_path: str, absolute_path: str) -> str:
    relative = os.path.relpath(absolute_path, os.path.abspath(workspace_path))
    return "" if relative == "." else to_posix(relative)


def is_image_path(path: str) -> bool:
    return IMAGE_EXTENSION_RE.search(path) is not None


def has_extension(query: str) -> bool:
    basename = query.rstrip("/").rsplit("/", 1)[-1]
    return _EXTENSION_RE.search(basename) is not None
