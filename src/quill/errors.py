"""Application-level exception types for Quill."""

from __future__ import annotations


class QuillError(Exception):
    """Base exception for Quill."""


class ConfigurationError(QuillError):
    """Base exception for configuration and startup validation errors."""


class WorkspaceNotFoundError(ConfigurationError):
    """Raised when the workspace passed on the command line does not exist."""


class AssistantBridgeError(QuillError):
    """Raised when the external assistant process cannot be run to completion."""
