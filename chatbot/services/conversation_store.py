"""Thread-safe in-memory store of conversation continuation pointers.

Maps a client-generated conversation id to the id of the provider's most
recent response in that conversation. The provider chains context from
that response, so this one pointer is all the server keeps per chat.

Entries expire after an idle TTL and the store is capped in size; the
least recently used conversation is dropped first when full. A dropped
conversation simply starts a fresh provider context on its next turn.

Usage:
    store = ConversationStore(ttl_seconds=86400, max_entries=10000)
    store.set("6f1c...", "resp_abc")
    store.get("6f1c...")  # "resp_abc", or None if unknown / expired
"""
from __future__ import annotations

import threading
import time
from collections import OrderedDict

import structlog

logger = structlog.get_logger(__name__)


class ConversationStore:
    """Conversation id → last response id, one entry per conversation.

    Attributes:
        _entries: Ordered map of conversation id to (expiry, response_id),
            least recently used first.
        _ttl: Idle time-to-live in seconds.
        _max_entries: Maximum number of conversations retained.
        _lock: Guards every access to `_entries`.
    """

    def __init__(
        self,
        ttl_seconds: float = 86400,
        max_entries: int = 10000,
        clock=time.monotonic,
    ) -> None:
        self._entries: OrderedDict[str, tuple[float, str]] = OrderedDict()
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._lock = threading.Lock()

    def get(self, conversation_id: str) -> str | None:
        """Return the last response id for a conversation.

        Args:
            conversation_id: Client conversation identifier.

        Returns:
            The stored response id, or None if absent or expired.
        """
        with self._lock:
            entry = self._entries.get(conversation_id)
            if entry is None:
                return None

            now = self._clock()
            expiry, response_id = entry
            if now >= expiry:
                del self._entries[conversation_id]
                logger.debug("conversation_expired", conversation_id=conversation_id)
                return None

            self._entries[conversation_id] = (now + self._ttl, response_id)
            self._entries.move_to_end(conversation_id)
            return response_id

    def set(self, conversation_id: str, response_id: str) -> None:
        """Record the latest response id, replacing any previous one.

        Args:
            conversation_id: Client conversation identifier.
            response_id: Provider response id to continue from next turn.
        """
        with self._lock:
            now = self._clock()
            if conversation_id not in self._entries and len(self._entries) >= self._max_entries:
                self._evict(now)

            self._entries[conversation_id] = (now + self._ttl, response_id)
            self._entries.move_to_end(conversation_id)

    def clear(self, conversation_id: str) -> bool:
        """Forget a conversation.

        Returns:
            True if the conversation was known.
        """
        with self._lock:
            return self._entries.pop(conversation_id, None) is not None

    @property
    def size(self) -> int:
        """Number of tracked conversations (including not-yet-purged expired ones)."""
        with self._lock:
            return len(self._entries)

    def _evict(self, now: float) -> None:
        """Make room for one entry. Must be called while holding the lock."""
        expired = [cid for cid, (expiry, _) in self._entries.items() if expiry <= now]
        for cid in expired:
            del self._entries[cid]

        if len(self._entries) >= self._max_entries:
            cid, _ = self._entries.popitem(last=False)
            logger.info("conversation_evicted", conversation_id=cid, reason="capacity")
        elif expired:
            logger.info("conversations_expired", count=len(expired))
