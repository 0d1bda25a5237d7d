import asyncio
import json
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from telegram_event_bot.config import BotConfig
from telegram_event_bot.models.event import build_event
from telegram_event_bot.services.events import EventStore
from telegram_event_bot.storage.base import JsonStorage, RedisStorage, SQLiteStorage
from telegram_event_bot.storage.factory import create_storage


def _event(**overrides):
    fields = dict(event_type="maps", date=datetime(2030, 1, 1, 20, tzinfo=timezone.utc), organizer=1)
    fields.update(overrides)
    return build_event(**fields)


@pytest.fixture(params=["json", "sqlite"])
def store(request, tmp_path):
    if request.param == "json":
        return EventStore(JsonStorage(tmp_path / "events.json"))
    return EventStore(SQLiteStorage(tmp_path / "bot.db", "events"))


def test_event_store_save_get_delete(store):
    async def scenario():
        event = _event(description="first")
        await store.save(event)
        loaded = await store.get(event.id)
        assert loaded == event
        assert isinstance(loaded.date, datetime)

        loaded.add_participant(5)
        await store.save(loaded)
        assert (await store.get(event.id)).participants == [5]

        assert await store.list_ids() == {event.id}
        assert await store.delete(event.id)
        assert not await store.delete(event.id)
        assert await store.get(event.id) is None
        assert await store.get("event_missing") is None

    asyncio.run(scenario())


def test_list_events_sorted_by_date(store):
    async def scenario():
        late = _event(date=datetime(2030, 3, 1, tzinfo=timezone.utc))
        early = _event(date=datetime(2030, 2, 1, tzinfo=timezone.utc))
        await store.save(late)
        await store.save(early)
        assert [event.id for event in await store.list_events()] == [early.id, late.id]

    asyncio.run(scenario())


def test_list_events_skips_unreadable_records(tmp_path):
    async def scenario():
        storage = JsonStorage(tmp_path / "events.json")
        store = EventStore(storage)
        good = _event()
        await store.save(good)
        await storage.put("broken", {"id": "broken", "type": "maps"})
        assert [event.id for event in await store.list_events()] == [good.id]

    asyncio.run(scenario())


def test_json_storage_writes_events_mapping(tmp_path):
    async def scenario():
        path = tmp_path / "events.json"
        store = EventStore(JsonStorage(path))
        event = _event()
        await store.save(event)
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data[event.id]["date"] == "2030-01-01T20:00:00+00:00"

    asyncio.run(scenario())


class FakeRedis(SimpleNamespace):
    def __init__(self):
        super().__init__(hashes={}, closed=False)

    async def hget(self, name, key):
        return self.hashes.get(name, {}).get(key)

    async def hset(self, name, key, value):
        self.hashes.setdefault(name, {})[key] = value
        return 1

    async def hdel(self, name, key):
        return 1 if self.hashes.get(name, {}).pop(key, None) is not None else 0

    async def hkeys(self, name):
        return list(self.hashes.get(name, {}))

    async def aclose(self):
        self.closed = True


def test_redis_storage_uses_events_hash():
    async def scenario():
        client = FakeRedis()
        store = EventStore(RedisStorage("redis://localhost:6379/0", "events", client=client))
        event = _event()
        await store.save(event)
        stored = json.loads(client.hashes["events"][event.id])
        assert stored["id"] == event.id
        assert stored["messageId"] is None
        assert (await store.get(event.id)) == event
        assert await store.delete(event.id)
        assert client.hashes["events"] == {}
        await store.close()
        assert client.closed

    asyncio.run(scenario())


def test_create_storage_selects_backend(tmp_path):
    base = dict(token="t", data_dir=tmp_path, logs_dir=tmp_path / "logs")
    assert isinstance(create_storage(BotConfig(**base), "events"), JsonStorage)
    sqlite = create_storage(BotConfig(storage_backend="sqlite", **base), "events")
    assert isinstance(sqlite, SQLiteStorage)
    assert (tmp_path / "bot.db").exists()
