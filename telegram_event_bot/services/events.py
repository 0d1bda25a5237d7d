from __future__ import annotations

import json
import logging

from ..config import BotConfig
from ..models.event import Event
from ..storage.base import KeyValueStorage
from ..storage.factory import create_storage

logger = logging.getLogger("telegram_event_bot.services.events")

NAMESPACE = "events"


class EventStore:
    """Durable event records keyed by event id.

    Every read rebuilds the :class:`Event` from its stored JSON so ``date`` is
    always an aware ``datetime``, never the stored text.
    """

    def __init__(self, storage: KeyValueStorage) -> None:
        self._storage = storage

    @classmethod
    def from_config(cls, config: BotConfig) -> "EventStore":
        return cls(create_storage(config, NAMESPACE))

    async def save(self, event: Event) -> None:
        await self._storage.put(event.id, event.to_dict())
        logger.debug("event_saved id=%s participants=%s", event.id, len(event.participants))

    async def get(self, event_id: str) -> Event | None:
        payload = await self._storage.get(event_id)
        if payload is None:
            return None
        return Event.from_dict(payload)

    async def delete(self, event_id: str) -> bool:
        removed = await self._storage.delete(event_id)
        logger.info("event_deleted id=%s removed=%s", event_id, removed)
        return removed

    async def list_ids(self) -> set[str]:
        return set(await self._storage.keys())

    async def list_events(self) -> list[Event]:
        events: list[Event] = []
        for event_id in await self._storage.keys():
            try:
                event = await self.get(event_id)
            except (KeyError, TypeError, ValueError, json.JSONDecodeError):
                logger.warning("skipping unreadable event record id=%s", event_id, exc_info=True)
                continue
            if event is not None:
                events.append(event)
        return sorted(events, key=lambda event: event.date)

    async def close(self) -> None:
        await self._storage.close()
