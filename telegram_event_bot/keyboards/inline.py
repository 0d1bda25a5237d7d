from __future__ import annotations

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup

from ..models.event import Event

PARTICIPATE = "participate"
DELETE = "delete"
ACTIONS = (PARTICIPATE, DELETE)


def action_data(action: str, event_id: str) -> str:
    return f"{action}_{event_id}"


def parse_event_action(data: str | None) -> tuple[str, str] | None:
    """Split callback data into ``(action, event_id)``.

    Event ids contain underscores themselves, so only the first segment is the
    action and the rest is joined back into the id.
    """

    if not data:
        return None
    action, *parts = data.split("_")
    event_id = "_".join(parts)
    if action not in ACTIONS or not event_id:
        return None
    return action, event_id


def event_actions(event_id: str, *, show_delete: bool) -> InlineKeyboardMarkup:
    row = [InlineKeyboardButton(text="✅ Participate", callback_data=action_data(PARTICIPATE, event_id))]
    if show_delete:
        row.append(InlineKeyboardButton(text="🗑️ Delete Event", callback_data=action_data(DELETE, event_id)))
    return InlineKeyboardMarkup(inline_keyboard=[row])


def event_controls_for(event: Event, viewer_id: int) -> InlineKeyboardMarkup:
    # Only the organizer's render carries the delete control.
    return event_actions(event.id, show_delete=viewer_id == event.organizer)
