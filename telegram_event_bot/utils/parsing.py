from __future__ import annotations

import re
from datetime import datetime
from typing import NamedTuple

from ..errors import EventBotError, FormatError, InvalidInput, ParseError, PastDateError
from .datetime import UTC, now_utc

DATETIME_RE = re.compile(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}", re.ASCII)
DATETIME_FORMAT = "%Y-%m-%d %H:%M"

CREATE_USAGE = "Usage: /create_event <type> <YYYY-MM-DD> <HH:MM> [description]"


class DateTimeValidation(NamedTuple):
    valid: bool
    date: datetime | None = None
    error: str | None = None


class CreateEventArgs(NamedTuple):
    event_type: str
    datetime_text: str
    description: str


def parse_event_datetime(text: str, *, now: datetime | None = None) -> datetime:
    """Parse ``YYYY-MM-DD HH:MM`` as a UTC instant strictly in the future.

    Raises :class:`FormatError` when the text does not match the pattern (no
    date parsing is attempted then), :class:`ParseError` when it matches but is
    not a real calendar date or time, and :class:`PastDateError` when the
    instant is not after ``now``.
    """

    if text is None or not DATETIME_RE.fullmatch(text):
        raise FormatError()
    try:
        parsed = datetime.strptime(text, DATETIME_FORMAT).replace(tzinfo=UTC)
    except ValueError as exc:
        raise ParseError() from exc
    if parsed <= (now or now_utc()):
        raise PastDateError()
    return parsed


def validate_datetime(text: str, *, now: datetime | None = None) -> DateTimeValidation:
    try:
        return DateTimeValidation(valid=True, date=parse_event_datetime(text, now=now))
    except EventBotError as exc:
        return DateTimeValidation(valid=False, error=exc.reason)


def parse_create_args(raw: str | None) -> CreateEventArgs:
    tokens = (raw or "").split(maxsplit=3)
    if len(tokens) < 3:
        raise InvalidInput(CREATE_USAGE)
    description = tokens[3].strip() if len(tokens) > 3 else ""
    return CreateEventArgs(
        event_type=tokens[0],
        datetime_text=f"{tokens[1]} {tokens[2]}",
        description=description,
    )


def parse_int_args(
    raw: str | None,
    names: tuple[str, ...],
    *,
    required: int = 0,
) -> list[int]:
    tokens = (raw or "").split()
    if len(tokens) < required:
        raise InvalidInput(f"Missing arguments: {' '.join(names[len(tokens):required])}")
    if len(tokens) > len(names):
        raise InvalidInput(f"Too many arguments, expected: {' '.join(names)}")
    values: list[int] = []
    for name, token in zip(names, tokens):
        try:
            values.append(int(token))
        except ValueError as exc:
            raise InvalidInput(f"{name} must be a whole number") from exc
    return values
