"""
commands.py - slash-command definitions and the table that recognises them in text.

A command maps the number of arguments it received to a message handler:
    Command("remind", "Set a reminder", ["remind_ask", "remind_when", "remind_set"])
    /remind             -> remind_ask
    /remind 10m         -> remind_when
    /remind 10m tea     -> remind_set
"""

from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

import structlog

from dialog.exceptions import DuplicateCommandError, InvalidCommandError
from dialog.validators import validate_announcement, validate_command_name

logger = structlog.get_logger("context_router.commands")

START_COMMAND = "start"


class Command:
    def __init__(self, command: str, description: str, handler_ids: Optional[Sequence[str]] = None,
                 num_parms: Optional[int] = None, announce: bool = True):
        is_valid, error = validate_command_name(command)
        if not is_valid:
            raise InvalidCommandError(error)
        handler_ids = list(handler_ids) if handler_ids is not None else [command]
        if not handler_ids:
            raise InvalidCommandError(f"Command {command!r} needs at least one handler id")
        if num_parms is not None and num_parms < 0:
            raise InvalidCommandError(f"Command {command!r}: num_parms must not be negative")

        self.command = command
        self.description = description
        self.handler_ids: Tuple[str, ...] = tuple(handler_ids)
        self.num_parms = num_parms if num_parms is not None else len(handler_ids) - 1
        self.announce = announce

    def __repr__(self):
        return f"Command({self.command!r}, handler_ids={list(self.handler_ids)!r}, num_parms={self.num_parms})"

    def parse_args(self, arg_text: str) -> List[str]:
        """
        Up to num_parms whitespace separated tokens; missing arguments give a
        shorter list, anything beyond num_parms is ignored.
        """
        if self.num_parms == 0:
            return []
        return arg_text.split()[:self.num_parms]

    def handler_for(self, parm_count: int) -> str:
        # surplus parameters fold into the last handler
        return self.handler_ids[min(parm_count, len(self.handler_ids) - 1)]


class CommandTable:
    def __init__(self, commands: Optional[Sequence[Command]] = None):
        self._commands: Dict[str, Command] = {}
        if commands:
            self.add_many(commands)

    def add(self, command: Command) -> None:
        if command.command in self._commands:
            raise DuplicateCommandError(command.command)
        self._commands[command.command] = command
        logger.debug("command_added", command=command.command, handler_ids=list(command.handler_ids))

    def add_many(self, commands: Iterable[Command]) -> None:
        commands = list(commands)
        seen = set(self._commands)
        for command in commands:
            if command.command in seen:
                raise DuplicateCommandError(command.command)
            seen.add(command.command)
        for command in commands:
            self.add(command)

    def get(self, name: str) -> Optional[Command]:
        return self._commands.get(name)

    def __contains__(self, name) -> bool:
        return name in self._commands

    def __len__(self) -> int:
        return len(self._commands)

    def __iter__(self) -> Iterator[Command]:
        return iter(list(self._commands.values()))

    def match(self, text: str, bot_username: Optional[str] = None) -> Optional[Tuple[Command, List[str]]]:
        """
        Recognises "/name arg1 arg2 ..." (or "/name@bot_username ...").
        Returns (command, argument tokens) or None if text is not a registered command.
        """
        if not text or not text.startswith("/") or len(text) < 2 or text[1].isspace():
            return None
        parts = text[1:].split(None, 1)
        token = parts[0]
        arg_text = parts[1] if len(parts) > 1 else ""

        name, at, target = token.partition("@")
        if at and (bot_username is None or target.lower() != bot_username.lstrip("@").lower()):
            return None

        command = self._commands.get(name)
        if command is None:
            return None
        return command, command.parse_args(arg_text)

    def announcements(self) -> List[Tuple[str, str]]:
        """(identifier, description) pairs for the transport's command menu."""
        entries = []
        for command in self._commands.values():
            if not command.announce:
                continue
            is_valid, error = validate_announcement(command)
            if not is_valid:
                logger.warning("command_not_announced", command=command.command, reason=error)
                continue
            entries.append((command.command, command.description.strip()))
        return entries
