"""Client-side chat session.

Holds what one browser tab (or terminal) knows about a chat: the ordered
messages, a conversation id generated once for the session, whether a
reply is being awaited and the current error. UI code calls `submit()`
and renders the snapshots pushed to its subscribers.

States:
    IDLE             → SENDING on an accepted submission
    SENDING          → IDLE on a reply, ERROR_DISPLAYED on any failure
    ERROR_DISPLAYED  → SENDING on the next accepted submission

Usage:
    async with httpx.AsyncClient(base_url="http://localhost:5000") as http:
        session = ChatSession(http)
        session.subscribe(render)
        await session.submit("hello")
"""
from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass
from typing import Callable

import httpx
import structlog

logger = structlog.get_logger(__name__)

CHAT_ENDPOINT = "/api/chat"
ERROR_MESSAGE = "Failed to generate a response. Please try again."
PROMPT_MAX_LENGTH = 1000


class SessionState(str, enum.Enum):
    IDLE = "idle"
    SENDING = "sending"
    ERROR_DISPLAYED = "error_displayed"


@dataclass(frozen=True)
class Message:
    """One entry in the visible history."""
    content: str
    role: str  # "user" | "assistant"


@dataclass(frozen=True)
class SessionSnapshot:
    """What a UI needs to render the session."""
    messages: tuple[Message, ...]
    is_sending: bool
    error: str | None


class ChatSession:
    """Serialized chat session against the relay's /api/chat endpoint.

    At most one request is in flight per session; submissions made while
    one is pending are rejected rather than queued, so replies are always
    appended in the order their prompts were sent.

    Args:
        http: Async HTTP client whose base_url points at the relay server.
        conversation_id: Override the generated id (tests only).
        prompt_max_length: Longest prompt (after trimming) the session will send.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        conversation_id: str | None = None,
        prompt_max_length: int = PROMPT_MAX_LENGTH,
    ) -> None:
        self._http = http
        self._prompt_max_length = prompt_max_length
        self._conversation_id = conversation_id or str(uuid.uuid4())
        self._messages: list[Message] = []
        self._state = SessionState.IDLE
        self._error: str | None = None
        self._subscribers: list[Callable[[SessionSnapshot], None]] = []

    # ── Read-only state ───────────────────────────────────────────────

    @property
    def conversation_id(self) -> str:
        return self._conversation_id

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def messages(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    @property
    def is_sending(self) -> bool:
        """Typing indicator: true exactly while a reply is awaited."""
        return self._state is SessionState.SENDING

    @property
    def error(self) -> str | None:
        return self._error

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            messages=self.messages,
            is_sending=self.is_sending,
            error=self._error,
        )

    def subscribe(self, callback: Callable[[SessionSnapshot], None]) -> Callable[[], None]:
        """Register a callback run with a snapshot after every change.

        Returns:
            A function that removes the callback.
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    # ── Submission ────────────────────────────────────────────────────

    async def submit(self, prompt: str) -> bool:
        """Send a prompt and wait for the reply.

        Blank or over-long prompts and submissions made while a reply is
        pending are ignored without touching history or the network.
        Failures are not raised; they move the session to ERROR_DISPLAYED and the user's
        message stays in history so it can be resubmitted.

        Args:
            prompt: Text typed by the user.

        Returns:
            True if the submission was accepted (whatever its outcome).
        """
        prompt = prompt.strip()
        if not prompt:
            return False
        if len(prompt) > self._prompt_max_length:
            logger.debug("submission_rejected", reason="too_long", conversation_id=self._conversation_id)
            return False
        if self._state is SessionState.SENDING:
            logger.debug("submission_rejected", reason="busy", conversation_id=self._conversation_id)
            return False

        # No await between the busy check above and entering SENDING.
        self._error = None
        self._messages.append(Message(content=prompt, role="user"))
        self._transition(SessionState.SENDING)

        try:
            reply = await self._request_reply(prompt)
        except Exception as e:
            logger.warning(
                "chat_request_failed",
                conversation_id=self._conversation_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            self._error = ERROR_MESSAGE
            self._transition(SessionState.ERROR_DISPLAYED)
            return True

        self._messages.append(Message(content=reply, role="assistant"))
        self._transition(SessionState.IDLE)
        return True

    async def _request_reply(self, prompt: str) -> str:
        response = await self._http.post(
            CHAT_ENDPOINT,
            json={"prompt": prompt, "conversationId": self._conversation_id},
        )
        response.raise_for_status()

        data = response.json()
        message = data.get("message") if isinstance(data, dict) else None
        if not isinstance(message, str):
            raise ValueError("Reply body has no 'message' string")
        return message

    def _transition(self, state: SessionState) -> None:
        self._state = state
        snapshot = self.snapshot()
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception:
                logger.exception("subscriber_failed", state=state.value)
