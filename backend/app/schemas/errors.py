"""Structured error payload schema used in API responses."""

from __future__ import annotations

from pydantic import Field
from sqlmodel import SQLModel


class ErrorResponse(SQLModel):
    """Error envelope produced by the installed exception handlers."""

    detail: str | dict[str, object] | list[object] = Field(
        description="Error message or validation error list.",
        examples=["Task not found", [{"loc": ["body", "title"], "msg": "Field required"}]],
    )
    request_id: str | None = Field(
        default=None,
        description="Request correlation identifier injected by middleware.",
    )
