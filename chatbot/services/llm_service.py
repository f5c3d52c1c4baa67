"""OpenAI Responses API client.

Handles all communication with the model provider. Each call sends one
prompt and, optionally, the id of a previous response; the provider
chains the new response onto that one so earlier turns stay in context
without the history being resent.

Supports:
- Response creation with `previous_response_id` chaining
- Retry with backoff on timeouts, 5xx and 429 (honoring Retry-After)
- Reply text extraction from either `output_text` or the `output` items
- Structured logging of all provider interactions

Usage:
    from chatbot.services.llm_service import LLMService

    service = LLMService(api_key="...", model="gpt-5-nano")
    response = service.create_response("hello", previous_response_id=None)
    response.id, response.text
"""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any

import httpx
import structlog

from chatbot.utils.exceptions import LLMRateLimitError, LLMServiceError

logger = structlog.get_logger(__name__)

RETRYABLE_STATUS_CODES = {500, 502, 503, 504}


@dataclass
class LLMResponse:
    """Structured response from the provider.

    `id` is the continuation token for the next turn; `text` is the reply.
    """
    id: str
    text: str
    model: str = ""
    status: str = ""
    usage: dict[str, int] = field(default_factory=dict)


class LLMService:
    """Service for the OpenAI Responses endpoint.

    Args:
        api_key: OpenAI API key.
        model: Model identifier (e.g., "gpt-5-nano").
        base_url: API base URL.
        timeout: HTTP request timeout in seconds.
        max_retries: Attempts per call before giving up.
        max_output_tokens: Optional cap on generated tokens.
        backoff_base: Base of the exponential backoff between attempts (seconds).
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-5-nano",
        base_url: str = "https://api.openai.com/v1",
        timeout: int = 60,
        max_retries: int = 2,
        max_output_tokens: int | None = None,
        backoff_base: float = 2.0,
    ) -> None:
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._max_retries = max(1, max_retries)
        self._max_output_tokens = max_output_tokens
        self._backoff_base = backoff_base

        self._client = httpx.Client(
            base_url=self._base_url,
            timeout=httpx.Timeout(timeout, connect=10),
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            follow_redirects=True,
        )

    @property
    def model(self) -> str:
        return self._model

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    # ── Core API ──────────────────────────────────────────────────────

    def create_response(
        self,
        prompt: str,
        previous_response_id: str | None = None,
    ) -> LLMResponse:
        """Generate a reply to `prompt`, continuing from a previous response.

        Args:
            prompt: User prompt text.
            previous_response_id: Id of the response to chain from, or None
                to start a new context.

        Returns:
            Parsed LLMResponse.

        Raises:
            LLMServiceError: On provider errors, timeouts or malformed replies.
            LLMRateLimitError: When rate limited after retries.
        """
        payload: dict[str, Any] = {
            "model": self._model,
            "input": prompt,
        }
        if previous_response_id:
            payload["previous_response_id"] = previous_response_id
        if self._max_output_tokens:
            payload["max_output_tokens"] = self._max_output_tokens

        return self._send_request(payload)

    # ── Request Handling ──────────────────────────────────────────────

    def _send_request(self, payload: dict[str, Any]) -> LLMResponse:
        """POST to /responses with retry logic."""
        for attempt in range(1, self._max_retries + 1):
            last_attempt = attempt == self._max_retries
            try:
                logger.info(
                    "llm_request",
                    model=self._model,
                    chained=bool(payload.get("previous_response_id")),
                    attempt=attempt,
                )

                start = time.monotonic()
                response = self._client.post("/responses", json=payload)
                duration_ms = round((time.monotonic() - start) * 1000)

                if response.status_code == 429:
                    retry_after = float(response.headers.get("Retry-After", 5))
                    if not last_attempt:
                        logger.warning("llm_rate_limited", retry_after=retry_after, attempt=attempt)
                        time.sleep(retry_after)
                        continue
                    raise LLMRateLimitError(retry_after=retry_after)

                if response.status_code >= 400:
                    logger.error(
                        "llm_error",
                        status=response.status_code,
                        body=response.text[:500],
                        attempt=attempt,
                    )
                    if response.status_code in RETRYABLE_STATUS_CODES and not last_attempt:
                        self._backoff(attempt)
                        continue
                    raise LLMServiceError(
                        message=f"OpenAI API error: {response.status_code} — {response.text[:200]}",
                        status_code=response.status_code,
                    )

                result = self._parse_response(response.json())

                logger.info(
                    "llm_response",
                    model=result.model,
                    response_id=result.id,
                    status=result.status,
                    duration_ms=duration_ms,
                    usage=result.usage,
                )
                return result

            except LLMServiceError:
                raise
            except httpx.TimeoutException as e:
                logger.warning("llm_timeout", attempt=attempt, error=str(e))
                if not last_attempt:
                    self._backoff(attempt)
                    continue
                raise LLMServiceError(message="OpenAI request timed out", status_code=504) from e
            except httpx.TransportError as e:
                logger.warning("llm_transport_error", attempt=attempt, error=str(e))
                if not last_attempt:
                    self._backoff(attempt)
                    continue
                raise LLMServiceError(message=f"OpenAI request failed: {e}") from e
            except Exception as e:
                logger.error("llm_unexpected_error", error=str(e), exc_info=True)
                raise LLMServiceError(message=f"Unexpected LLM error: {e}") from e

        raise LLMServiceError(message="All LLM retries exhausted")

    def _backoff(self, attempt: int) -> None:
        time.sleep(self._backoff_base ** attempt if self._backoff_base else 0)

    # ── Response Parsing ──────────────────────────────────────────────

    def _parse_response(self, data: dict[str, Any]) -> LLMResponse:
        """Parse the raw Responses API JSON into an LLMResponse.

        Args:
            data: Raw JSON body.

        Returns:
            Structured LLMResponse.

        Raises:
            LLMServiceError: If the body has no id or no reply text.
        """
        if not isinstance(data, dict):
            raise LLMServiceError(message="OpenAI returned a non-object response")

        response_id = data.get("id")
        if not response_id:
            raise LLMServiceError(message="OpenAI response has no id")

        status = data.get("status", "")
        if status == "failed":
            error = data.get("error") or {}
            raise LLMServiceError(message=f"OpenAI response failed: {error.get('message', 'unknown error')}")

        text = data.get("output_text")
        if text is None:
            text = self._collect_output_text(data.get("output") or [])
        if not text:
            raise LLMServiceError(message="OpenAI response contains no output text")

        usage = data.get("usage") or {}
        usage_info = {
            "input_tokens": usage.get("input_tokens", 0),
            "output_tokens": usage.get("output_tokens", 0),
            "total_tokens": usage.get("total_tokens", 0),
        }

        return LLMResponse(
            id=response_id,
            text=text,
            model=data.get("model", self._model),
            status=status,
            usage=usage_info,
        )

    @staticmethod
    def _collect_output_text(output: list[dict[str, Any]]) -> str:
        """Join the text parts of every message item in `output`."""
        parts = []
        for item in output:
            if item.get("type") != "message":
                continue
            for content in item.get("content") or []:
                if content.get("type") == "output_text":
                    parts.append(content.get("text", ""))
        return "".join(parts)
