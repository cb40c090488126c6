"""
msg_handlers.py - message handler definitions and their registry.

A handler callback receives (msg, parms, user); the default handler also
receives the payload type as a fourth argument because it has to branch on
whatever the user sent.
"""

from typing import Any, Callable, Dict, Iterable, List, Optional

import structlog

from dialog.events import PayloadType
from dialog.exceptions import DuplicateHandlerError

logger = structlog.get_logger("context_router.msg_handlers")


class MsgHandler:
    def __init__(self, id: str, handler: Callable[..., Any], expected_type: str = PayloadType.TEXT.value):
        self.id = id
        self.handler = handler
        # raises ValueError for types the router does not know
        self.expected_type = PayloadType(expected_type).value

    def __repr__(self):
        return f"MsgHandler({self.id!r}, expected_type={self.expected_type!r})"

    def accepts(self, payload_type: Optional[str]) -> bool:
        return self.expected_type == payload_type

    def execute(self, msg, parms: List[Any], user, payload_type: Optional[str] = None):
        if payload_type is None:
            return self.handler(msg, parms, user)
        return self.handler(msg, parms, user, payload_type)


class HandlerRegistry:
    def __init__(self, handlers: Optional[Iterable[MsgHandler]] = None):
        self._handlers: Dict[str, MsgHandler] = {}
        if handlers:
            self.add_many(handlers)

    def add(self, msg_handler: MsgHandler) -> None:
        if msg_handler.id in self._handlers:
            raise DuplicateHandlerError(msg_handler.id)
        self._handlers[msg_handler.id] = msg_handler
        logger.debug("msg_handler_added", handler_id=msg_handler.id, expected_type=msg_handler.expected_type)

    def add_many(self, msg_handlers: Iterable[MsgHandler]) -> None:
        msg_handlers = list(msg_handlers)
        seen = set(self._handlers)
        for msg_handler in msg_handlers:
            if msg_handler.id in seen:
                raise DuplicateHandlerError(msg_handler.id)
            seen.add(msg_handler.id)
        for msg_handler in msg_handlers:
            self.add(msg_handler)

    def get(self, handler_id: Optional[str]) -> Optional[MsgHandler]:
        if handler_id is None:
            return None
        return self._handlers.get(handler_id)

    def __contains__(self, handler_id) -> bool:
        return handler_id in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)
