"""
transport.py - python-telegram-bot implementation of the router's Transport.

Every outbound call is scheduled on the Application and returns at once;
Telegram errors are logged here and never reach the dispatcher.
"""

from typing import Any, Dict, List, Optional, Tuple

import structlog
from telegram import BotCommand, MenuButtonCommands
from telegram.error import TelegramError

from dialog.transport import Transport

logger = structlog.get_logger("context_router.telegram_transport")


class TelegramTransport(Transport):
    def __init__(self, application, parse_mode: Optional[str] = "Markdown"):
        super().__init__()
        self.application = application
        self.parse_mode = parse_mode

    @property
    def bot(self):
        return self.application.bot

    def schedule(self, coroutine):
        return self.application.create_task(coroutine)

    def send_message(self, chat_id, text: str) -> None:
        self.schedule(self._send("send_message", chat_id, self.bot.send_message(
            chat_id=chat_id, text=text, parse_mode=self.parse_mode
        )))

    def send_photo(self, chat_id, photo: Any, options: Optional[Dict[str, Any]] = None) -> None:
        self.schedule(self._send("send_photo", chat_id, self.bot.send_photo(
            chat_id=chat_id, photo=photo, **(options or {})
        )))

    def send_audio(self, chat_id, audio: Any, options: Optional[Dict[str, Any]] = None) -> None:
        self.schedule(self._send("send_audio", chat_id, self.bot.send_audio(
            chat_id=chat_id, audio=audio, **(options or {})
        )))

    def set_commands(self, commands: List[Tuple[str, str]]) -> None:
        self.schedule(self._announce(commands))

    async def _send(self, action: str, chat_id, coroutine) -> None:
        try:
            await coroutine
        except TelegramError as e:
            logger.warning("telegram_send_error", action=action, chat_id=chat_id, error=str(e))

    async def _announce(self, commands: List[Tuple[str, str]]) -> None:
        try:
            await self.bot.set_my_commands([BotCommand(name, description) for name, description in commands])
            # show the menu button only once the commands are registered
            await self.bot.set_chat_menu_button(menu_button=MenuButtonCommands())
        except TelegramError as e:
            logger.warning("telegram_announce_error", error=str(e))
