"""Domain models."""

from .event import EVENT_TYPES, Event, build_event

__all__ = ["EVENT_TYPES", "Event", "build_event"]
