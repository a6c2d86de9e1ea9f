"""
Short-term conversation memory keyed by requestor.

Features:
- One live ChatHistory per requestor, created on first turn
- Absolute expiry relative to the last write (12h by default)
- Reset to an empty history when the completion service rate-limits
- No persistence: expired histories are simply dropped
"""
from typing import Any, Callable, Dict, List, Optional
from datetime import datetime, timedelta
from enum import Enum
import logging

from subject_router.services.cache import TTLCache


class ChatRole(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ChatHistory:
    """Ordered, append-only list of chat messages for one requestor."""

    def __init__(self, messages: Optional[List[Dict[str, str]]] = None):
        self._messages: List[Dict[str, str]] = list(messages or [])

    def add_message(self, role: ChatRole, content: str):
        self._messages.append({"role": ChatRole(role).value, "content": content})

    def add_system_message(self, content: str):
        self.add_message(ChatRole.SYSTEM, content)

    def add_user_message(self, content: str):
        self.add_message(ChatRole.USER, content)

    def add_assistant_message(self, content: str):
        self.add_message(ChatRole.ASSISTANT, content)

    @property
    def messages(self) -> List[Dict[str, str]]:
        return [dict(m) for m in self._messages]

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self):
        return iter(self.messages)


class SessionStore:
    def __init__(
        self,
        ttl_hours: float = 12,
        clock: Callable[[], datetime] = datetime.now
    ):
        self._cache: TTLCache[ChatHistory] = TTLCache(timedelta(hours=ttl_hours), clock=clock)

    def get_or_create(self, requestor: str) -> ChatHistory:
        """
        Return the requestor's live history, creating an empty one if absent
        or expired. Always rewrites the entry so its expiry clock restarts.
        """
        history = self._cache.get(requestor)
        if history is None:
            history = ChatHistory()
            logging.info(f"[SessionStore] Created new history for requestor {requestor}")
        self._cache.set(requestor, history)
        return history

    def get(self, requestor: str) -> Optional[ChatHistory]:
        return self._cache.get(requestor)

    def reset(self, requestor: str) -> ChatHistory:
        """Replace the requestor's history with an empty one."""
        history = ChatHistory()
        self._cache.set(requestor, history)
        logging.warning(f"[SessionStore] History reset for requestor {requestor}")
        return history

    def clear(self, requestor: str):
        self._cache.pop(requestor)

    def get_session_info(self, requestor: str) -> Optional[Dict[str, Any]]:
        history = self._cache.get(requestor)
        if history is None:
            return None
        expires_at = self._cache.expires_at(requestor)
        return {
            "requestor": requestor,
            "message_count": len(history),
            "expires_at": expires_at.isoformat() if expires_at else None,
        }

    def get_all_sessions(self) -> List[Dict[str, Any]]:
        sessions = []
        for requestor in self._cache.keys():
            info = self.get_session_info(requestor)
            if info:
                sessions.append(info)
        return sessions

    def purge_expired(self) -> int:
        removed = self._cache.purge_expired()
        if removed:
            logging.info(f"[SessionStore] Removed {removed} expired histories")
        return removed
