"""
exceptions.py - registration errors of the routing core.

Dispatch itself never raises: routing anomalies are reported as
DispatchOutcome values (see dispatcher.py).
"""

class RouterError(Exception):
    pass

class DuplicateUserError(RouterError):
    def __init__(self, chat_id):
        super().__init__(f"User {chat_id!r} is already registered")
        self.chat_id = chat_id

class DuplicateHandlerError(RouterError):
    def __init__(self, handler_id):
        super().__init__(f"Message handler {handler_id!r} is already registered")
        self.handler_id = handler_id

class DuplicateCommandError(RouterError):
    def __init__(self, command):
        super().__init__(f"Command {command!r} is already registered")
        self.command = command

class InvalidCommandError(RouterError):
    def __init__(self, message):
        super().__init__(message)
        self.message = message
