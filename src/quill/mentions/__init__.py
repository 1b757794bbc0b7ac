"""Workspace mention indexing and resolution."""

from quill.mentions.cache import MentionIndexCache
from quill.mentions.coordinator import MentionCoordinator, MentionResolution, infer_mention_type
from quill.mentions.providers import (
    DirectoryMentionProvider,
    FileMentionProvider,
    ImageMentionProvider,
    McpMentionProvider,
    MentionProvider,
    MentionProviderInput,
)

__all__ = [
    "DirectoryMentionProvider",
    "FileMentionProvider",
    "ImageMentionProvider",
    "McpMentionProvider",
    "MentionCoordinator",
    "MentionIndexCache",
    "MentionProvider",
    "MentionProviderInput",
    "MentionResolution",
    "infer_mention_type",
]
