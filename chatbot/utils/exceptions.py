"""Custom exception hierarchy for the chat relay.

All application-specific exceptions inherit from ChatBotError,
enabling uniform error handling in the global error handlers.

Hierarchy:
    ChatBotError (base)
    ├── ValidationError         — Malformed / out-of-range client input
    └── ServiceError            — Completion could not be produced
        └── LLMServiceError     — Upstream model provider failures
            └── LLMRateLimitError — Provider rate limit
"""
from __future__ import annotations


class ChatBotError(Exception):
    """Base exception for the chat relay."""

    def __init__(self, message: str, status_code: int = 500) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


# ── Validation Errors ────────────────────────────────────────────────

class ValidationError(ChatBotError):
    """Raised when a chat request fails validation.

    Args:
        fields: Mapping of field name to the list of failure messages.
        message: Summary message for the response body.
    """

    def __init__(
        self,
        fields: dict[str, list[str]],
        message: str = "Invalid request",
    ) -> None:
        self.fields = fields
        super().__init__(message, status_code=400)


# ── Service Errors ───────────────────────────────────────────────────

class ServiceError(ChatBotError):
    """Raised when a completion could not be generated.

    The message is for operators only; callers receive a generic reply.
    """

    def __init__(self, message: str, status_code: int = 500) -> None:
        super().__init__(message, status_code)


class LLMServiceError(ServiceError):
    """Raised when the model provider call fails."""

    def __init__(self, message: str, status_code: int = 502) -> None:
        super().__init__(message, status_code)


class LLMRateLimitError(LLMServiceError):
    """Raised when the provider returns 429 after all retries."""

    def __init__(self, retry_after: float | None = None) -> None:
        self.retry_after = retry_after
        super().__init__(
            message="LLM rate limit exceeded. Please wait and try again.",
            status_code=429,
        )
