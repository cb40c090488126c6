"""
validators.py - checks for command identifiers and command-menu entries.
"""

import re

# Telegram's setMyCommands limits
ANNOUNCE_NAME_RE = re.compile(r"^[a-z0-9_]{1,32}$")
MAX_DESCRIPTION_LENGTH = 256


def validate_command_name(name):
    """
    Identifier of a slash-command, without the leading slash.
    Returns (is_valid: bool, error_msg: str)
    """
    if not isinstance(name, str) or not name:
        return False, "Command identifier must be a non-empty string"
    if name.startswith("/"):
        return False, f"Command identifier {name!r} must not start with '/'"
    if "@" in name or any(ch.isspace() for ch in name):
        return False, f"Command identifier {name!r} must not contain '@' or whitespace"
    return True, ""


def validate_announcement(command):
    """
    Whether a command can be shown in the transport's command menu.
    Returns (is_valid: bool, error_msg: str)
    """
    if not ANNOUNCE_NAME_RE.match(command.command):
        return False, "Identifier must be 1-32 characters of a-z, 0-9 or '_'"
    description = (command.description or "").strip()
    if not description:
        return False, "Description is empty"
    if len(description) > MAX_DESCRIPTION_LENGTH:
        return False, f"Description is longer than {MAX_DESCRIPTION_LENGTH} characters"
    return True, ""
