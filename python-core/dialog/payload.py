"""
payload.py - turns a normalized event into the ordered parameter list handlers receive.
"""

from typing import Any, List

from dialog.events import PayloadType, SINGLE_OBJECT_TYPES


def _text_parms(event) -> List[Any]:
    # None / empty groups are optional arguments that were not given
    return [group for group in event.groups if group]


def _photo_parms(event) -> List[Any]:
    return list(event.sizes)


def _location_parms(event) -> List[Any]:
    parms = [event.location]
    if event.venue is not None:
        parms.append(event.venue)
    return parms


def _single_object_parms(event) -> List[Any]:
    return [event.media]


_EXTRACTORS = {
    PayloadType.TEXT.value: _text_parms,
    PayloadType.PHOTO.value: _photo_parms,
    PayloadType.LOCATION.value: _location_parms,
}
_EXTRACTORS.update({payload_type: _single_object_parms for payload_type in SINGLE_OBJECT_TYPES})


def extract_parms(event) -> List[Any]:
    """Parameters of `event` for its declared payload type; unknown types yield []."""
    extractor = _EXTRACTORS.get(event.payload_type)
    if extractor is None:
        return []
    return extractor(event)
