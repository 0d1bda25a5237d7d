"""Errors raised by event operations.

Every error carries a short ``reason`` that is safe to show to the user who
triggered the action. Handlers reply with it privately; nothing here is meant
to crash the process.
"""

from __future__ import annotations


class EventBotError(RuntimeError):
    default_reason = "Something went wrong."

    def __init__(self, reason: str | None = None) -> None:
        self.reason = reason or self.default_reason
        super().__init__(self.reason)


class Unauthorized(EventBotError):
    default_reason = "You are not authorized to create events."


class Forbidden(EventBotError):
    default_reason = "Only the event organizer can delete this event."


class InvalidInput(EventBotError):
    default_reason = "Invalid input."


class FormatError(InvalidInput):
    default_reason = "Invalid format. Use: YYYY-MM-DD HH:MM"


class ParseError(InvalidInput):
    default_reason = "Invalid date or time."


class PastDateError(InvalidInput):
    default_reason = "Event date must be in the future."


class NotFound(EventBotError):
    default_reason = "Event not found."


class AlreadyJoined(EventBotError):
    default_reason = "You are already participating in this event!"


class ChannelUnavailable(EventBotError):
    default_reason = "Event channel not found."


class DeliveryFailure(EventBotError):
    default_reason = "Could not deliver the message."
