"""
transport.py - what the routing core needs from a chat transport.
"""
import asyncio
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Set, Tuple


class Transport(ABC):
    """
    Outbound side of a chat client. Sends are fire-and-forget: the core never
    waits for them and does not see their failures.

    Subclasses must call `super().__init__()`; it creates `_background_tasks`,
    the strong references that keep scheduled tasks alive until they finish.
    """

    def __init__(self):
        self._background_tasks: Set[asyncio.Task] = set()

    @abstractmethod
    def send_message(self, chat_id, text: str) -> None:
        pass

    @abstractmethod
    def send_photo(self, chat_id, photo: Any, options: Optional[Dict[str, Any]] = None) -> None:
        pass

    @abstractmethod
    def send_audio(self, chat_id, audio: Any, options: Optional[Dict[str, Any]] = None) -> None:
        pass

    @abstractmethod
    def set_commands(self, commands: List[Tuple[str, str]]) -> None:
        """
        Publishes (identifier, description) pairs in the client's command menu.
        """
        pass

    def schedule(self, coroutine):
        """Runs a coroutine in the background on the running event loop."""
        task = asyncio.get_running_loop().create_task(coroutine)
        # the loop only keeps weak references to tasks
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        return task
