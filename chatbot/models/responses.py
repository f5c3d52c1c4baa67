"""Pydantic models for API response serialization."""
from __future__ import annotations

from pydantic import BaseModel, Field


class ChatReply(BaseModel):
    """Assistant reply to one chat turn."""
    message: str = Field(..., description="Assistant reply text")


class ErrorResponse(BaseModel):
    """Standard error body.

    `fields` is only present on validation failures and maps each failing
    field to its messages.
    """
    error: str = Field(..., description="Human-readable error message")
    fields: dict[str, list[str]] | None = Field(default=None, description="Per-field validation failures")
