"""
Tests for parameter extraction (dialog/payload.py)
Requires: pytest
"""

import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest
from dialog.events import (
    CommandEvent, LocationEvent, MediaEvent, PayloadType, PhotoEvent, TextEvent,
)
from dialog.payload import extract_parms


def test_text_groups_filter_missing_and_empty():
    event = CommandEvent(1, None, command="cmd", groups=("a", None, "", "b"))
    assert extract_parms(event) == ["a", "b"]


def test_plain_text_is_single_parameter():
    event = TextEvent(1, None, text="hello there", groups=("hello there",))
    assert extract_parms(event) == ["hello there"]


def test_photo_sizes_are_spread():
    sizes = ("small", "medium", "large")
    assert extract_parms(PhotoEvent(1, None, sizes=sizes)) == ["small", "medium", "large"]


def test_location_without_venue():
    assert extract_parms(LocationEvent(1, None, location="loc")) == ["loc"]


def test_location_with_venue():
    assert extract_parms(LocationEvent(1, None, location="loc", venue="venue")) == ["loc", "venue"]


@pytest.mark.parametrize("media_type", ["video", "voice", "audio", "document", "poll", "contact", "sticker"])
def test_single_object_payloads(media_type):
    media = object()
    assert extract_parms(MediaEvent(1, None, media_type=media_type, media=media)) == [media]


def test_enum_media_type_is_accepted():
    event = MediaEvent(1, None, media_type=PayloadType.VOICE, media="v")
    assert event.payload_type == "voice"
    assert extract_parms(event) == ["v"]


def test_unknown_type_yields_nothing():
    assert extract_parms(MediaEvent(1, None, media_type="animation", media="gif")) == []


@pytest.mark.parametrize("media_type", ["text", "photo", "location", PayloadType.PHOTO])
def test_media_event_rejects_structured_types(media_type):
    with pytest.raises(ValueError):
        MediaEvent(1, None, media_type=media_type, media="p")


def test_payload_types_of_variants():
    assert TextEvent(1, None, text="x").payload_type == "text"
    assert CommandEvent(1, None, command="x").payload_type == "text"
    assert PhotoEvent(1, None, sizes=()).payload_type == PayloadType.PHOTO
    assert LocationEvent(1, None, location=None).payload_type == "location"


if __name__ == "__main__":
    import pytest
    pytest.main([__file__])
