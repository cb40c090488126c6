"""
handlers.py - python-telegram-bot handlers feeding the dispatcher.

All text goes through one handler (command recognition is the dispatcher's
job), every media type gets its own. Edited messages are not routed.
"""

import structlog
from telegram import Update
from telegram.ext import ContextTypes, MessageHandler, filters

from dialog.events import LocationEvent, MediaEvent, PayloadType, PhotoEvent

logger = structlog.get_logger("context_router.handlers")

MEDIA_FILTERS = {
    PayloadType.PHOTO.value: filters.PHOTO,
    PayloadType.VIDEO.value: filters.VIDEO,
    PayloadType.VOICE.value: filters.VOICE,
    PayloadType.AUDIO.value: filters.AUDIO,
    PayloadType.DOCUMENT.value: filters.Document.ALL,
    PayloadType.LOCATION.value: filters.LOCATION,
    PayloadType.CONTACT.value: filters.CONTACT,
    PayloadType.POLL.value: filters.POLL,
    PayloadType.STICKER.value: filters.Sticker.ALL,
}


def media_event(media_type: str, chat_id, message):
    """Normalizes a Telegram media message into a router event."""
    if media_type == PayloadType.PHOTO.value:
        return PhotoEvent(chat_id, message, sizes=tuple(message.photo or ()))
    if media_type == PayloadType.LOCATION.value:
        return LocationEvent(chat_id, message, location=message.location, venue=message.venue)
    return MediaEvent(chat_id, message, media_type=media_type, media=getattr(message, media_type))


def setup_handlers(application, dispatcher):
    async def handle_text(update: Update, context: ContextTypes.DEFAULT_TYPE):
        message = update.effective_message
        outcome = dispatcher.dispatch_text(update.effective_chat.id, message.text, raw=message)
        logger.debug("text_routed", chat_id=update.effective_chat.id, outcome=outcome.value)

    def make_media_handler(media_type):
        async def handle_media(update: Update, context: ContextTypes.DEFAULT_TYPE):
            message = update.effective_message
            outcome = dispatcher.dispatch(media_event(media_type, update.effective_chat.id, message))
            logger.debug("media_routed", chat_id=update.effective_chat.id, media_type=media_type,
                         outcome=outcome.value)
        return handle_media

    application.add_handler(
        MessageHandler(filters.TEXT & filters.UpdateType.MESSAGE, handle_text)
    )
    for media_type, media_filter in MEDIA_FILTERS.items():
        application.add_handler(
            MessageHandler(media_filter & filters.UpdateType.MESSAGE, make_media_handler(media_type))
        )
