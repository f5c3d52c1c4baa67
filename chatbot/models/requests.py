"""Pydantic models for API request validation."""
from __future__ import annotations

import uuid
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticCustomError

from chatbot.utils.exceptions import ValidationError

DEFAULT_PROMPT_MAX_LENGTH = 1000


class ChatRequest(BaseModel):
    """Incoming chat turn.

    Attributes:
        prompt: The user's prompt, trimmed (1..max length chars).
        conversation_id: Client-generated conversation UUID, canonical form.
    """
    model_config = ConfigDict(populate_by_name=True)

    prompt: str = Field(..., description="User prompt")
    conversation_id: str = Field(..., alias="conversationId", description="Conversation UUID")

    @field_validator("prompt")
    @classmethod
    def validate_prompt(cls, v: str, info: ValidationInfo) -> str:
        max_length = (info.context or {}).get("prompt_max_length", DEFAULT_PROMPT_MAX_LENGTH)
        v = v.strip()
        if not v:
            raise PydanticCustomError("prompt_required", "Prompt is required")
        if len(v) > max_length:
            raise PydanticCustomError("prompt_too_long", "Prompt is too long")
        return v

    @field_validator("conversation_id")
    @classmethod
    def validate_conversation_id(cls, v: str) -> str:
        # Only the hyphenated 8-4-4-4-12 form; no braces, urn: prefix or bare hex.
        try:
            parsed = uuid.UUID(v)
        except ValueError:
            parsed = None
        if parsed is None or len(v) != 36 or str(parsed) != v.lower():
            raise PydanticCustomError("invalid_uuid", "Invalid conversation id")
        return str(parsed)


def parse_chat_request(
    data: Any,
    prompt_max_length: int = DEFAULT_PROMPT_MAX_LENGTH,
) -> ChatRequest:
    """Validate a decoded JSON body into a ChatRequest.

    Args:
        data: Decoded JSON body (anything `request.get_json` returned).
        prompt_max_length: Max prompt length after trimming.

    Returns:
        The validated request.

    Raises:
        ValidationError: With every failing field and its messages.
    """
    if not isinstance(data, dict):
        raise ValidationError({"body": ["Request body must be a JSON object"]})

    try:
        return ChatRequest.model_validate(
            data,
            context={"prompt_max_length": prompt_max_length},
        )
    except PydanticValidationError as e:
        fields: dict[str, list[str]] = {}
        for error in e.errors():
            name = ".".join(str(part) for part in error.get("loc", ())) or "body"
            fields.setdefault(name, []).append(error.get("msg", "Invalid value"))
        raise ValidationError(fields) from None
