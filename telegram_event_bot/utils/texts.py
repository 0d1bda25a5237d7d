from __future__ import annotations

from datetime import datetime

from aiogram.utils.markdown import hbold, hlink
from aiogram.utils.text_decorations import html_decoration

from ..locales import DEFAULT_LANGUAGE, get_text
from ..models.event import Event
from .datetime import format_relative, format_utc, now_utc

PARTICIPANTS_LIMIT = 1024


def mention(user_id: int) -> str:
    return hlink(str(user_id), f"tg://user?id={user_id}")


def format_participants(participants: list[int], *, limit: int = PARTICIPANTS_LIMIT) -> str:
    lines: list[str] = []
    length = 0
    for user_id in participants:
        line = mention(user_id)
        if length + len(line) + 1 > limit - 4:
            lines.append("...")
            break
        lines.append(line)
        length += len(line) + 1
    return "\n".join(lines)


def _date_line(date: datetime) -> str:
    return f"🗓️ {hbold('Date & Time')}: {format_utc(date)}"


def _date_lines(date: datetime, now: datetime) -> list[str]:
    """Date plus the time left, for one-off private messages only."""
    return [
        _date_line(date),
        f"⏰ {hbold('Starts')}: {format_relative(date, now)} (as of sending)",
    ]


def _description_line(description: str) -> list[str]:
    if not description:
        return []
    return [f"📝 {hbold('Description')}: {html_decoration.quote(description)}"]


def render_announcement(event: Event, *, language: str = DEFAULT_LANGUAGE) -> str:
    lines = [hbold(get_text(language, "announcement_title", name=event.type_name)), ""]
    lines.append(_date_line(event.date))
    lines.append(f"👤 {hbold('Organizer')}: {mention(event.organizer)}")
    lines.extend(_description_line(event.description))
    lines.append("")
    count = len(event.participants)
    lines.append(f"👥 {hbold(f'Participants ({count})')}")
    if count:
        lines.append(format_participants(event.participants))
    else:
        lines.append(get_text(language, "no_participants"))
    return "\n".join(lines)


def render_join_confirmation(event: Event, *, now: datetime | None = None, language: str = DEFAULT_LANGUAGE) -> str:
    now = now or now_utc()
    lines = [
        hbold(get_text(language, "join_confirmation_title")),
        get_text(language, "join_confirmation_body", name=hbold(event.type_name)),
        "",
    ]
    lines.extend(_date_lines(event.date, now))
    return "\n".join(lines)


def render_cancellation(event: Event, *, language: str = DEFAULT_LANGUAGE) -> str:
    return "\n".join(
        [
            hbold(get_text(language, "cancellation_title")),
            get_text(language, "cancellation_body", name=hbold(event.type_name)),
            "",
            f"{hbold('Originally Scheduled')}: {format_utc(event.date)}",
        ]
    )


def render_reminder(
    event: Event,
    reminder_type: str,
    event_date: datetime,
    *,
    now: datetime | None = None,
    language: str = DEFAULT_LANGUAGE,
) -> str:
    now = now or now_utc()
    lines = [
        hbold(get_text(language, "reminder_title", label=reminder_type)),
        get_text(language, "reminder_body", name=hbold(event.type_name)),
        "",
    ]
    lines.extend(_date_lines(event_date, now))
    lines.extend(_description_line(event.description))
    return "\n".join(lines)


def render_event_list(events: list[Event], *, language: str = DEFAULT_LANGUAGE) -> str:
    if not events:
        return get_text(language, "no_events")
    lines = [get_text(language, "events_header")]
    for event in events:
        lines.extend(
            [
                f"• {hbold('ID')}: {html_decoration.quote(event.id)}",
                f"  {hbold('Type')}: {html_decoration.quote(event.type)}",
                f"  {hbold('Date')}: {format_utc(event.date)}",
                f"  {hbold('Organizer')}: {mention(event.organizer)}",
                f"  {hbold('Participants')}: {len(event.participants)}",
                "",
            ]
        )
    return "\n".join(lines).rstrip()
