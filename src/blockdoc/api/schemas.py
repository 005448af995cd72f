"""
Request/response models for the blockdoc HTTP API.

The `content` field of `RenderRequest` is deliberately untyped: the article
store hands block documents over as opaque JSON, and malformed documents are
a rendering concern (placeholder output), not a validation error, unless the
caller opts into ``strict`` parsing.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from blockdoc.execution.sink import Channel, EvaluationResult


class RenderRequest(BaseModel):
    content: Any = Field(default=None, description="Block document (Editor.js output format).")
    run_code: bool = Field(default=False, description="Attach run controls to executable code blocks.")
    max_width: str | None = Field(default=None, description="CSS max-width for the container.")
    strict: bool = Field(default=False, description="Reject malformed documents with HTTP 400.")


class RenderResponse(BaseModel):
    html: str = Field(..., description="Sanitized article markup.")
    surface_html: str = Field(..., description="Container markup including run controls.")
    executable_blocks: int = Field(..., ge=0, description="Number of runnable code blocks.")


class ExecuteRequest(BaseModel):
    source: str = Field(..., max_length=100_000, description="JavaScript source to evaluate.")


class ConsoleEntryModel(BaseModel):
    channel: Channel
    content: str


class ExecuteResponse(BaseModel):
    entries: list[ConsoleEntryModel] = Field(default_factory=list)
    value: str | None = None
    failed: bool = False

    @classmethod
    def from_result(cls, result: EvaluationResult) -> ExecuteResponse:
        return cls(
            entries=[ConsoleEntryModel(channel=e.channel, content=e.content) for e in result.entries],
            value=result.value,
            failed=result.failed,
        )


__all__ = [
    "ConsoleEntryModel",
    "ExecuteRequest",
    "ExecuteResponse",
    "RenderRequest",
    "RenderResponse",
]
