"""
example_app.py - a small notebook bot showing how applications plug into the dispatcher.

/start onboards the sender, /note walks through a two-step dialog using user
contexts and carried parameters, /place waits for a location.
"""

from telegram.helpers import escape_markdown

from dialog.commands import Command
from dialog.context_manager import BotUser
from dialog.events import PayloadType
from dialog.msg_handlers import MsgHandler

NOTE_TTL = 5  # minutes to answer a note question
PLACE_TTL = 10


def _notes(user):
    if user.app_data is None:
        user.app_data = {}
    return user.app_data.setdefault("notes", [])


def register_example_handlers(dispatcher):
    def start(msg, parms, user):
        dispatcher.add_user(BotUser(msg.chat_id, app_data={"notes": []}))
        dispatcher.send_message(msg.chat_id, "Welcome! Send /help to see what I can do.")

    def stop(msg, parms, user):
        dispatcher.remove_user(user.chat_id)
        dispatcher.send_message(user.chat_id, "Bye! Send /start to register again.")

    def show_help(msg, parms, user):
        lines = [f"/{command} - {description}" for command, description in dispatcher.commands.announcements()]
        dispatcher.send_message(user.chat_id, "\n".join(lines))

    def note_ask_label(msg, parms, user):
        user.set_context("note_ask_text", ttl=NOTE_TTL)
        dispatcher.send_message(user.chat_id, "Which label should the note get?")

    def note_ask_text(msg, parms, user):
        label = parms[0]
        user.set_context("note_save", ttl=NOTE_TTL, carried_parms=[label])
        dispatcher.send_message(user.chat_id, f"What should I note under *{escape_markdown(label)}*?")

    def note_save(msg, parms, user):
        label, text = parms[0], parms[1]
        _notes(user).append({"label": label, "text": text})
        user.delete_context()
        dispatcher.send_message(user.chat_id, f"Noted under *{escape_markdown(label)}*.")

    def list_notes(msg, parms, user):
        notes = _notes(user)
        if parms:
            notes = [note for note in notes if note["label"] == parms[0]]
        if not notes:
            dispatcher.send_message(user.chat_id, "No notes yet.")
            return
        lines = [f"{escape_markdown(n['label'])}: {escape_markdown(n['text'])}" for n in notes]
        dispatcher.send_message(user.chat_id, "\n".join(lines))

    def place_ask(msg, parms, user):
        user.set_context("place_save", ttl=PLACE_TTL)
        dispatcher.send_message(user.chat_id, "Share a location with me.")

    def place_save(msg, parms, user):
        location = parms[0]
        text = f"{location.latitude:.5f}, {location.longitude:.5f}"
        if len(parms) > 1:
            text = f"{parms[1].title} ({text})"
        _notes(user).append({"label": "place", "text": text})
        user.delete_context()
        dispatcher.send_message(user.chat_id, f"Saved place {escape_markdown(text)}.")

    def fallback(msg, parms, user, payload_type):
        dispatcher.send_message(user.chat_id, f"I got a {payload_type} but was not waiting for one. Try /help.")

    dispatcher.add_msg_handlers([
        MsgHandler("start", start),
        MsgHandler("stop", stop),
        MsgHandler("help", show_help),
        MsgHandler("note_ask_label", note_ask_label),
        MsgHandler("note_ask_text", note_ask_text),
        MsgHandler("note_save", note_save),
        MsgHandler("notes", list_notes),
        MsgHandler("place_ask", place_ask),
        MsgHandler("place_save", place_save, expected_type=PayloadType.LOCATION),
        MsgHandler("fallback", fallback),
    ])
    dispatcher.add_commands([
        Command("start", "Register with the bot"),
        Command("stop", "Unregister and forget my notes"),
        Command("help", "List the commands"),
        Command("note", "Write down a note", ["note_ask_label", "note_ask_text"]),
        Command("notes", "Show my notes, optionally for one label", ["notes", "notes"]),
        Command("place", "Save a place from a shared location", ["place_ask"]),
    ])
    dispatcher.set_default_handler("fallback")
