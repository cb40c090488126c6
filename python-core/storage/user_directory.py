"""
user_directory.py - in-memory directory of known senders, keyed by chat id.
(Persistence of the user list belongs to the application.)
"""

from typing import Dict, Iterable, Iterator, Optional

import structlog

from dialog.context_manager import BotUser
from dialog.exceptions import DuplicateUserError

logger = structlog.get_logger("context_router.user_directory")


class UserDirectory:
    def __init__(self, users: Optional[Iterable[BotUser]] = None):
        self._users: Dict[object, BotUser] = {}
        if users:
            self.add_many(users)

    def add(self, user: BotUser) -> None:
        if user.chat_id in self._users:
            raise DuplicateUserError(user.chat_id)
        self._users[user.chat_id] = user
        logger.debug("user_added", chat_id=user.chat_id)

    def add_many(self, users: Iterable[BotUser]) -> None:
        """All or nothing: a duplicate anywhere in the batch leaves the directory unchanged."""
        users = list(users)
        seen = set(self._users)
        for user in users:
            if user.chat_id in seen:
                raise DuplicateUserError(user.chat_id)
            seen.add(user.chat_id)
        for user in users:
            self.add(user)

    def remove(self, chat_id) -> Optional[BotUser]:
        user = self._users.pop(chat_id, None)
        if user is not None:
            logger.debug("user_removed", chat_id=chat_id)
        return user

    def get(self, chat_id) -> Optional[BotUser]:
        return self._users.get(chat_id)

    def __contains__(self, chat_id) -> bool:
        return chat_id in self._users

    def __len__(self) -> int:
        return len(self._users)

    def __iter__(self) -> Iterator[BotUser]:
        return iter(list(self._users.values()))
