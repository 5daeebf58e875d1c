"""Common response schemas shared across API routers."""

from __future__ import annotations

from pydantic import Field
from sqlmodel import SQLModel


class OkResponse(SQLModel):
    """Standard success payload for mutations without a response body."""

    ok: bool = Field(default=True, description="Indicates the operation succeeded.", examples=[True])
