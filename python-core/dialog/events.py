"""
events.py - normalized chat events delivered by the transport adapter.

Each variant carries exactly the fields its payload type needs; `raw` is the
transport's original message object and is handed to handlers untouched.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Optional, Tuple


class PayloadType(str, Enum):
    TEXT = "text"
    PHOTO = "photo"
    VIDEO = "video"
    VOICE = "voice"
    AUDIO = "audio"
    DOCUMENT = "document"
    LOCATION = "location"
    CONTACT = "contact"
    POLL = "poll"
    STICKER = "sticker"


# single-object payloads, as plain strings
SINGLE_OBJECT_TYPES = frozenset({
    PayloadType.VIDEO.value,
    PayloadType.VOICE.value,
    PayloadType.AUDIO.value,
    PayloadType.DOCUMENT.value,
    PayloadType.POLL.value,
    PayloadType.CONTACT.value,
    PayloadType.STICKER.value,
})

# payloads carried by TextEvent/CommandEvent, PhotoEvent and LocationEvent
STRUCTURED_TYPES = frozenset({
    PayloadType.TEXT.value,
    PayloadType.PHOTO.value,
    PayloadType.LOCATION.value,
})


@dataclass(frozen=True)
class ChatEvent:
    chat_id: Any
    raw: Any

    PAYLOAD_TYPE: ClassVar[Optional[str]] = None

    @property
    def payload_type(self) -> Optional[str]:
        return self.PAYLOAD_TYPE


@dataclass(frozen=True)
class TextEvent(ChatEvent):
    """Text that is not a command. For plain text the whole text is the only group."""
    text: str
    groups: Tuple[Optional[str], ...] = ()

    PAYLOAD_TYPE: ClassVar[Optional[str]] = PayloadType.TEXT.value


@dataclass(frozen=True)
class CommandEvent(ChatEvent):
    """A recognised slash-command; `groups` are its argument tokens."""
    command: str
    groups: Tuple[Optional[str], ...] = ()

    PAYLOAD_TYPE: ClassVar[Optional[str]] = PayloadType.TEXT.value


@dataclass(frozen=True)
class PhotoEvent(ChatEvent):
    sizes: Tuple[Any, ...]

    PAYLOAD_TYPE: ClassVar[Optional[str]] = PayloadType.PHOTO.value


@dataclass(frozen=True)
class MediaEvent(ChatEvent):
    """A single-object payload; text, photo and location have their own variants."""
    media_type: str
    media: Any

    def __post_init__(self):
        if self.payload_type in STRUCTURED_TYPES:
            raise ValueError(f"{self.payload_type} payloads need their own event type, not MediaEvent")

    @property
    def payload_type(self) -> Optional[str]:
        return getattr(self.media_type, "value", self.media_type)


@dataclass(frozen=True)
class LocationEvent(ChatEvent):
    location: Any
    venue: Any = None

    PAYLOAD_TYPE: ClassVar[Optional[str]] = PayloadType.LOCATION.value
