"""Completion service — one chat turn against the model provider.

Looks up where a conversation left off, asks the provider for a reply
chained onto that point, and records the new continuation pointer. The
provider's response shape stops here; callers only see reply text.

Usage:
    service = ChatService(llm_service, conversation_store)
    result = service.complete("hello", "11111111-1111-1111-1111-111111111111")
    result.reply_text
"""
from __future__ import annotations

from dataclasses import dataclass

import structlog

from chatbot.services.conversation_store import ConversationStore
from chatbot.services.llm_service import LLMService
from chatbot.utils.exceptions import ServiceError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CompletionResult:
    """Outcome of a successful turn."""
    reply_text: str
    response_id: str


class ChatService:
    """Produces replies and keeps each conversation's continuation pointer.

    Args:
        llm_service: Provider client.
        store: Conversation id → last response id map.
    """

    def __init__(self, llm_service: LLMService, store: ConversationStore) -> None:
        self._llm = llm_service
        self._store = store

    def complete(self, prompt: str, conversation_id: str) -> CompletionResult:
        """Generate the next reply in a conversation.

        The store is updated only after the provider call succeeds, so a
        failed turn never becomes the context of the next one.

        Args:
            prompt: Validated user prompt.
            conversation_id: Validated conversation UUID (string form).

        Returns:
            CompletionResult with the reply text.

        Raises:
            ServiceError: If the provider call fails for any reason.
        """
        previous_response_id = self._store.get(conversation_id)

        logger.info(
            "completion_started",
            conversation_id=conversation_id,
            prompt_length=len(prompt),
            continued=previous_response_id is not None,
        )

        try:
            response = self._llm.create_response(
                prompt,
                previous_response_id=previous_response_id,
            )
        except ServiceError as e:
            logger.error(
                "completion_failed",
                conversation_id=conversation_id,
                error=e.message,
                error_type=type(e).__name__,
            )
            raise
        except Exception as e:
            logger.error(
                "completion_failed",
                conversation_id=conversation_id,
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True,
            )
            raise ServiceError(f"Completion failed: {e}") from e

        self._store.set(conversation_id, response.id)

        logger.info(
            "completion_succeeded",
            conversation_id=conversation_id,
            response_id=response.id,
            reply_length=len(response.text),
        )
        return CompletionResult(reply_text=response.text, response_id=response.id)
