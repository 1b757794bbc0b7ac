"""Quill - slash commands and @mentions for an assistant composer."""

from .composer.service import ComposerService

__version__ = "0.1.0"

__all__ = ["ComposerService"]
