"""Request shapes accepted from the UI layer."""

from __future__ import annotations

from pydantic import BaseModel, Field


class SuggestRequest(BaseModel):
    raw_input: str = Field(..., description="Full composer text")
    cursor: int = Field(..., description="Cursor offset into raw_input; clamped to the text bounds")
    workspace_id: str = Field(..., description="Active workspace id")
    thread_id: str | None = Field(default=None, description="Active conversation thread")


class PrepareRequest(SuggestRequest):
    selected_mention_ids: list[str] = Field(default_factory=list)
    model_override: str | None = Field(default=None)
