"""
Integration test: handlers.py turns Telegram updates into dispatcher calls
Requires: pytest, pytest-asyncio, unittest.mock
"""

import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from bot.handlers import MEDIA_FILTERS, media_event, setup_handlers
from dialog.dispatcher import DispatchOutcome
from dialog.events import LocationEvent, MediaEvent, PhotoEvent


def make_update(chat_id, **message_fields):
    return SimpleNamespace(
        effective_chat=SimpleNamespace(id=chat_id),
        effective_message=SimpleNamespace(**message_fields),
    )


@pytest.fixture
def wired():
    app = MagicMock()
    dispatcher = MagicMock()
    dispatcher.dispatch_text.return_value = DispatchOutcome.HANDLED
    dispatcher.dispatch.return_value = DispatchOutcome.HANDLED
    setup_handlers(app, dispatcher)
    callbacks = [call[0][0].callback for call in app.add_handler.call_args_list]
    return app, dispatcher, callbacks


def media_callback(callbacks, media_type):
    # text handler first, then one per media type in MEDIA_FILTERS order
    return callbacks[1 + list(MEDIA_FILTERS).index(media_type)]


def test_one_handler_for_text_and_each_media_type(wired):
    app, _, callbacks = wired
    assert app.add_handler.call_count == 1 + len(MEDIA_FILTERS)
    assert set(MEDIA_FILTERS) == {
        "photo", "video", "voice", "audio", "document", "location", "contact", "poll", "sticker"
    }


@pytest.mark.asyncio
async def test_text_goes_to_dispatch_text(wired):
    _, dispatcher, callbacks = wired
    update = make_update(7, text="/remind 10m")
    await callbacks[0](update, None)
    dispatcher.dispatch_text.assert_called_once_with(7, "/remind 10m", raw=update.effective_message)


@pytest.mark.asyncio
async def test_photo_update_becomes_photo_event(wired):
    _, dispatcher, callbacks = wired
    update = make_update(7, photo=("s", "m", "l"))
    await media_callback(callbacks, "photo")(update, None)
    event = dispatcher.dispatch.call_args[0][0]
    assert event == PhotoEvent(7, update.effective_message, sizes=("s", "m", "l"))


@pytest.mark.asyncio
async def test_venue_update_becomes_location_event(wired):
    _, dispatcher, callbacks = wired
    update = make_update(7, location="loc", venue="venue")
    await media_callback(callbacks, "location")(update, None)
    event = dispatcher.dispatch.call_args[0][0]
    assert isinstance(event, LocationEvent)
    assert (event.location, event.venue) == ("loc", "venue")


@pytest.mark.asyncio
async def test_voice_update_becomes_media_event(wired):
    _, dispatcher, callbacks = wired
    update = make_update(7, voice="voice-file")
    await media_callback(callbacks, "voice")(update, None)
    event = dispatcher.dispatch.call_args[0][0]
    assert event == MediaEvent(7, update.effective_message, media_type="voice", media="voice-file")
    assert event.payload_type == "voice"


def test_media_event_without_venue():
    message = SimpleNamespace(location="loc", venue=None)
    event = media_event("location", 3, message)
    assert event.venue is None
    assert event.raw is message


if __name__ == "__main__":
    import pytest
    pytest.main([__file__])
