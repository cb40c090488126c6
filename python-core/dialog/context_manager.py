"""
context_manager.py - known bot users and their pending conversation context.

A context names the message handler that takes the user's next non-command
message. It expires lazily: every read checks the TTL and drops a stale
context before answering, there is no background sweeper.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, List, Optional

import structlog

logger = structlog.get_logger("context_router.context_manager")

DEFAULT_CONTEXT_TTL = 5  # minutes


def utc_now() -> datetime:
    # aware UTC: TTL arithmetic must not see local DST shifts
    return datetime.now(timezone.utc)


@dataclass
class UserContext:
    """
    Pending continuation of a user's conversation.

    carried_parms are prepended to the parameters of the next message, so a
    multi-step dialog can collect its arguments across several handlers.
    data is opaque to the router and only read back by handlers.
    """
    next_handler_id: str
    created_at: datetime
    ttl: int = DEFAULT_CONTEXT_TTL
    carried_parms: Optional[List[Any]] = None
    data: Any = None

    def is_expired(self, now: datetime) -> bool:
        # valid through the boundary: only strictly more than ttl minutes expires
        return now - self.created_at > timedelta(minutes=self.ttl)


class BotUser:
    """A sender known to the bot, holding at most one UserContext."""

    def __init__(self, chat_id, app_data=None, clock: Optional[Callable[[], datetime]] = None):
        self.chat_id = chat_id
        self.app_data = app_data
        self._clock = clock or utc_now
        self._context: Optional[UserContext] = None

    def __repr__(self):
        return f"BotUser(chat_id={self.chat_id!r}, has_context={self._context is not None})"

    def verify_context(self) -> None:
        """Drops the context if it has outlived its TTL."""
        if self._context is not None and self._context.is_expired(self._clock()):
            logger.debug("context_expired", chat_id=self.chat_id,
                         next_handler_id=self._context.next_handler_id)
            self.delete_context()

    def has_context(self) -> bool:
        self.verify_context()
        return self._context is not None

    def get_context(self) -> Optional[UserContext]:
        self.verify_context()
        return self._context

    def set_context(self, next_handler_id: str, ttl: int = DEFAULT_CONTEXT_TTL,
                    carried_parms: Optional[List[Any]] = None, data: Any = None) -> UserContext:
        """Replaces any previous context; nothing of the old one is kept."""
        self._context = UserContext(
            next_handler_id=next_handler_id,
            created_at=self._clock(),
            ttl=ttl,
            carried_parms=list(carried_parms) if carried_parms is not None else None,
            data=data,
        )
        logger.debug("context_set", chat_id=self.chat_id, next_handler_id=next_handler_id, ttl=ttl)
        return self._context

    def delete_context(self) -> None:
        self._context = None
