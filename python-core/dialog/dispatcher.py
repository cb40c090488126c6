"""
dispatcher.py - routes incoming chat events to message handlers.

Routing rules:
- Commands: only /start is open to unknown senders, and /start is refused
  to known ones. The handler is picked by argument count, must expect text,
  and the sender's context is cleared before it runs.
- Everything else: unknown senders are turned away. A live context names the
  handler (its carried parameters go first); without one the default handler
  gets the message together with its payload type.

Handler-not-found and type mismatches are dropped silently, handler
exceptions are reported and swallowed: dispatch() never raises.
"""

import inspect
from enum import Enum
from typing import Any, Callable, Iterable, List, Optional, Tuple

import structlog

from dialog.commands import START_COMMAND, Command, CommandTable
from dialog.context_manager import BotUser
from dialog.events import ChatEvent, CommandEvent, TextEvent
from dialog.msg_handlers import HandlerRegistry, MsgHandler
from dialog.payload import extract_parms
from dialog.transport import Transport
from storage.user_directory import UserDirectory

logger = structlog.get_logger("context_router.dispatcher")

ErrorReporter = Callable[[BaseException, ChatEvent, Optional[str]], None]


class DispatchOutcome(str, Enum):
    HANDLED = "handled"
    UNKNOWN_SENDER = "unknown_sender"
    ALREADY_KNOWN = "already_known"
    HANDLER_NOT_FOUND = "handler_not_found"
    TYPE_MISMATCH = "type_mismatch"
    NO_HANDLER = "no_handler"
    UNRECOGNIZED_COMMAND = "unrecognized_command"
    HANDLER_ERROR = "handler_error"


def log_handler_error(exc: BaseException, event: ChatEvent, handler_id: Optional[str]) -> None:
    logger.error("handler_failed", chat_id=event.chat_id, handler_id=handler_id,
                 payload_type=event.payload_type, exc_info=exc)


class Dispatcher:
    def __init__(self, transport: Transport, users: Optional[UserDirectory] = None,
                 handlers: Optional[HandlerRegistry] = None, commands: Optional[CommandTable] = None,
                 error_reporter: Optional[ErrorReporter] = None, metrics=None,
                 bot_username: Optional[str] = None):
        self.transport = transport
        self.users = users if users is not None else UserDirectory()
        self.handlers = handlers if handlers is not None else HandlerRegistry()
        self.commands = commands if commands is not None else CommandTable()
        self.error_reporter = error_reporter or log_handler_error
        self.metrics = metrics
        self.bot_username = bot_username

        self.default_handler_id: Optional[str] = None
        self.unknown_user_reply: Optional[str] = None
        self.already_known_reply: Optional[str] = None

    # --- Registration ---

    def add_user(self, user: BotUser) -> None:
        self.users.add(user)

    def add_users(self, users: Iterable[BotUser]) -> None:
        self.users.add_many(users)

    def remove_user(self, chat_id) -> Optional[BotUser]:
        return self.users.remove(chat_id)

    def get_user(self, chat_id) -> Optional[BotUser]:
        return self.users.get(chat_id)

    def add_command(self, command: Command) -> None:
        self.commands.add(command)

    def add_commands(self, commands: Iterable[Command]) -> None:
        self.commands.add_many(commands)

    def add_msg_handler(self, msg_handler: MsgHandler) -> None:
        self.handlers.add(msg_handler)

    def add_msg_handlers(self, msg_handlers: Iterable[MsgHandler]) -> None:
        self.handlers.add_many(msg_handlers)

    def get_msg_handler(self, handler_id: str) -> Optional[MsgHandler]:
        return self.handlers.get(handler_id)

    def set_default_handler(self, handler_id: Optional[str]) -> None:
        self.default_handler_id = handler_id

    def set_unknown_user_reply(self, text: Optional[str]) -> None:
        self.unknown_user_reply = text

    def set_already_known_reply(self, text: Optional[str]) -> None:
        self.already_known_reply = text

    def announce_commands(self) -> List[Tuple[str, str]]:
        entries = self.commands.announcements()
        logger.info("commands_announced", commands=[name for name, _ in entries])
        self.transport.set_commands(entries)
        return entries

    # --- Outbound pass-through ---

    def send_message(self, chat_id, text: str) -> None:
        logger.debug("send_message", chat_id=chat_id, length=len(text))
        self.transport.send_message(chat_id, text)

    def send_photo(self, chat_id, photo: Any, options=None) -> None:
        logger.debug("send_photo", chat_id=chat_id)
        self.transport.send_photo(chat_id, photo, options)

    def send_audio(self, chat_id, audio: Any, options=None) -> None:
        logger.debug("send_audio", chat_id=chat_id)
        self.transport.send_audio(chat_id, audio, options)

    # --- Routing ---

    def dispatch_text(self, chat_id, text: str, raw: Any = None) -> DispatchOutcome:
        """Entry point for text messages: decides between command and plain text."""
        matched = self.commands.match(text, self.bot_username)
        if matched is not None:
            command, args = matched
            return self.dispatch(CommandEvent(chat_id, raw, command=command.command, groups=tuple(args)))
        if text.startswith("/"):
            logger.debug("unrecognized_command", chat_id=chat_id, text=text.split(None, 1)[0])
            self._record("command", DispatchOutcome.UNRECOGNIZED_COMMAND)
            return DispatchOutcome.UNRECOGNIZED_COMMAND
        return self.dispatch(TextEvent(chat_id, raw, text=text, groups=(text,)))

    def dispatch(self, event: ChatEvent) -> DispatchOutcome:
        path = "command" if isinstance(event, CommandEvent) else "message"
        try:
            if isinstance(event, CommandEvent):
                outcome = self._dispatch_command(event)
            else:
                outcome = self._dispatch_message(event)
        except Exception as e:
            self._report(e, event, None)
            outcome = DispatchOutcome.HANDLER_ERROR
        self._record(path, outcome)
        return outcome

    def _dispatch_command(self, event: CommandEvent) -> DispatchOutcome:
        logger.debug("command_received", chat_id=event.chat_id, command=event.command)
        command = self.commands.get(event.command)
        if command is None:
            logger.debug("unrecognized_command", chat_id=event.chat_id, command=event.command)
            return DispatchOutcome.UNRECOGNIZED_COMMAND

        user, rejection = self._verify_sender(event.chat_id, command.command)
        if rejection is not None:
            return rejection

        parms = extract_parms(event)
        handler_id = command.handler_for(len(parms))
        msg_handler = self.handlers.get(handler_id)
        if msg_handler is None:
            logger.warning("handler_not_found", chat_id=event.chat_id, command=command.command,
                           handler_id=handler_id)
            return DispatchOutcome.HANDLER_NOT_FOUND
        if not msg_handler.accepts(event.payload_type):
            logger.debug("type_mismatch", chat_id=event.chat_id, handler_id=handler_id,
                         expected=msg_handler.expected_type, got=event.payload_type)
            return DispatchOutcome.TYPE_MISMATCH

        # any command resets the conversation
        if user is not None:
            user.delete_context()
        return self._invoke(msg_handler, event, parms, user)

    def _dispatch_message(self, event: ChatEvent) -> DispatchOutcome:
        logger.debug("message_received", chat_id=event.chat_id, payload_type=event.payload_type)
        user, rejection = self._verify_sender(event.chat_id)
        if rejection is not None:
            return rejection

        parms = extract_parms(event)
        context = user.get_context()
        if context is not None:
            msg_handler = self.handlers.get(context.next_handler_id)
            if msg_handler is None:
                logger.warning("handler_not_found", chat_id=event.chat_id,
                               handler_id=context.next_handler_id)
                return DispatchOutcome.HANDLER_NOT_FOUND
            if context.carried_parms:
                parms = [*context.carried_parms, *parms]
            if not msg_handler.accepts(event.payload_type):
                # the context stays; the next message or the TTL decides
                logger.debug("type_mismatch", chat_id=event.chat_id, handler_id=msg_handler.id,
                             expected=msg_handler.expected_type, got=event.payload_type)
                return DispatchOutcome.TYPE_MISMATCH
            return self._invoke(msg_handler, event, parms, user)

        if self.default_handler_id is None:
            logger.debug("no_handler", chat_id=event.chat_id, payload_type=event.payload_type)
            return DispatchOutcome.NO_HANDLER
        msg_handler = self.handlers.get(self.default_handler_id)
        if msg_handler is None:
            logger.warning("handler_not_found", chat_id=event.chat_id, handler_id=self.default_handler_id)
            return DispatchOutcome.HANDLER_NOT_FOUND
        return self._invoke(msg_handler, event, parms, user, payload_type=event.payload_type)

    def _verify_sender(self, chat_id, command: Optional[str] = None) -> Tuple[Optional[BotUser], Optional[DispatchOutcome]]:
        """
        (user, None) when the sender may continue, (None, outcome) when not.
        Only /start is open to unknown senders and only to them.
        """
        user = self.users.get(chat_id)
        if user is None and command != START_COMMAND:
            logger.info("unknown_sender", chat_id=chat_id, command=command)
            self._reply(chat_id, self.unknown_user_reply)
            return None, DispatchOutcome.UNKNOWN_SENDER
        if user is not None and command == START_COMMAND:
            logger.info("already_known_sender", chat_id=chat_id)
            self._reply(chat_id, self.already_known_reply)
            return None, DispatchOutcome.ALREADY_KNOWN
        return user, None

    def _invoke(self, msg_handler: MsgHandler, event: ChatEvent, parms: List[Any], user: Optional[BotUser],
                payload_type: Optional[str] = None) -> DispatchOutcome:
        logger.debug("handler_invoked", chat_id=event.chat_id, handler_id=msg_handler.id, parms_count=len(parms))
        try:
            result = msg_handler.execute(event.raw, parms, user, payload_type)
        except Exception as e:
            self._report(e, event, msg_handler.id)
            return DispatchOutcome.HANDLER_ERROR
        if inspect.isawaitable(result):
            self.transport.schedule(self._await_handler(result, event, msg_handler.id))
        return DispatchOutcome.HANDLED

    async def _await_handler(self, awaitable, event: ChatEvent, handler_id: str) -> None:
        try:
            await awaitable
        except Exception as e:
            self._report(e, event, handler_id)

    def _reply(self, chat_id, text: Optional[str]) -> None:
        if text is not None:
            self.send_message(chat_id, text)

    def _report(self, exc: BaseException, event: ChatEvent, handler_id: Optional[str]) -> None:
        try:
            self.error_reporter(exc, event, handler_id)
        except Exception:
            logger.exception("error_reporter_failed", handler_id=handler_id)

    def _record(self, path: str, outcome: DispatchOutcome) -> None:
        if self.metrics is not None:
            self.metrics.record(path, outcome)
