from __future__ import annotations

from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class Texts:
    start: str
    help: str
    event_created: str
    event_joined: str
    event_deleted: str
    events_header: str
    no_events: str
    purge_done: str
    command_denied: str
    error_generic: str
    already_processing: str
    announcement_title: str
    join_confirmation_title: str
    join_confirmation_body: str
    cancellation_title: str
    cancellation_body: str
    reminder_title: str
    reminder_body: str
    no_participants: str


MESSAGES: Dict[str, Texts] = {
    "en": Texts(
        start=(
            "Hi! I announce community events and remind you before they start.\n"
            "• Press <b>Participate</b> under an announcement to join.\n"
            "• Reminders arrive here 24 hours, 12 hours and 1 hour before the start.\n"
            "Keep this chat open so I am allowed to message you."
        ),
        help=(
            "Commands:\n"
            "• /create_event &lt;type&gt; &lt;YYYY-MM-DD&gt; &lt;HH:MM&gt; [description] (UTC)\n"
            "• /roll [sides 2-100] [count 1-10]\n"
            "• /pvp &lt;current_level&gt; &lt;goal_level&gt; [current_progress]\n"
            "• /list_events, /purge_events (organizers only)\n"
            "Event types: {types}"
        ),
        event_created="✅ Event created successfully! Check {channel}",
        event_joined="✅ You joined the event.",
        event_deleted="✅ Event deleted successfully.",
        events_header="<b>Active Events:</b>",
        no_events="No active events found.",
        purge_done="✅ All events purged (debug).",
        command_denied="❌ You are not authorized to use this command.",
        error_generic="An error occurred while executing the command.",
        already_processing="Already processing…",
        announcement_title="📅 {name}",
        join_confirmation_title="✅ Event Registration Confirmed",
        join_confirmation_body="You have successfully registered for: {name}",
        cancellation_title="❌ Event Cancelled",
        cancellation_body="The {name} event you registered for has been cancelled by the organizer.",
        reminder_title="⏰ Event Reminder - {label} remaining",
        reminder_body="Don't forget about the {name} event!",
        no_participants="No participants yet",
    ),
}

DEFAULT_LANGUAGE = "en"


def get_text(language: str, key: str, **kwargs: str) -> str:
    texts = MESSAGES.get(language, MESSAGES[DEFAULT_LANGUAGE])
    value = getattr(texts, key)
    if kwargs:
        return value.format(**kwargs)
    return value
