from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Optional

from ..utils.datetime import ensure_utc, parse_instant

EVENT_TYPES: dict[str, str] = {
    "maps": "Maps",
    "extreme_trials": "Extreme Trials",
    "savage_raids": "Savage Raids",
    "mount_farm": "Mount Farm",
    "occult_crescent": "Occult Crescent",
    "blue_mage_skill_farm": "Blue Mage Skill Farm",
    "minion_farm": "Minion Farm",
    "treasure_trove_farm": "Treasure Trove Farm",
}


def event_type_name(value: str) -> str:
    # Values outside the catalog are shown as typed.
    return EVENT_TYPES.get(value, value)


def new_event_id() -> str:
    return f"event_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def _unique(values: Iterable[int]) -> list[int]:
    seen: set[int] = set()
    result: list[int] = []
    for value in values:
        value = int(value)
        if value in seen:
            continue
        seen.add(value)
        result.append(value)
    return result


@dataclass(slots=True)
class Event:
    id: str
    type: str
    date: datetime
    organizer: int
    description: str = ""
    participants: list[int] = field(default_factory=list)
    message_id: Optional[int] = None

    def __post_init__(self) -> None:
        self.date = ensure_utc(self.date)
        self.participants = _unique(self.participants)

    @property
    def type_name(self) -> str:
        return event_type_name(self.type)

    def has_participant(self, user_id: int) -> bool:
        return user_id in self.participants

    def add_participant(self, user_id: int) -> bool:
        if self.has_participant(user_id):
            return False
        self.participants.append(user_id)
        return True

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "date": self.date.isoformat(),
            "organizer": self.organizer,
            "description": self.description,
            "participants": list(self.participants),
            "messageId": self.message_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Event":
        raw_date = data["date"]
        date = parse_instant(raw_date) if isinstance(raw_date, str) else ensure_utc(raw_date)
        message_id = data.get("messageId", data.get("message_id"))
        return cls(
            id=str(data["id"]),
            type=str(data["type"]),
            date=date,
            organizer=int(data["organizer"]),
            description=data.get("description") or "",
            participants=list(data.get("participants") or []),
            message_id=int(message_id) if message_id is not None else None,
        )


def build_event(
    *,
    event_type: str,
    date: datetime,
    organizer: int,
    description: str = "",
    event_id: str | None = None,
) -> Event:
    return Event(
        id=event_id or new_event_id(),
        type=event_type,
        date=date,
        organizer=organizer,
        description=description or "",
    )
