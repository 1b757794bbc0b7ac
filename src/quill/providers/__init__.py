"""Execution routing and the external assistant bridge."""

from quill.providers.assistant import AssistantBridge, AssistantRequest, ClaudeCliBridge
from quill.providers.router import ExecutionRequest, ExecutionRouter

__all__ = ["AssistantBridge", "AssistantRequest", "ClaudeCliBridge", "ExecutionRequest", "ExecutionRouter"]
