from __future__ import annotations

import asyncio
import json
import logging
import sqlite3
from pathlib import Path
from typing import Any, Protocol

import redis.asyncio as redis

logger = logging.getLogger("telegram_event_bot.storage")

Payload = dict[str, Any]


class KeyValueStorage(Protocol):
    """A single namespace of JSON payloads addressed by key.

    Each operation is atomic for its key; there are no multi-key transactions.
    """

    async def get(self, key: str) -> Payload | None: ...

    async def put(self, key: str, payload: Payload) -> None: ...

    async def delete(self, key: str) -> bool: ...

    async def keys(self) -> list[str]: ...

    async def close(self) -> None: ...


class JsonStorage:
    def __init__(self, path: Path) -> None:
        self._path = path
        self._lock = asyncio.Lock()
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def _read(self) -> dict[str, Payload]:
        if not self._path.exists():
            return {}
        return json.loads(self._path.read_text(encoding="utf-8"))

    def _write(self, data: dict[str, Payload]) -> None:
        tmp = self._path.with_suffix(".tmp")
        tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp.replace(self._path)

    async def get(self, key: str) -> Payload | None:
        async with self._lock:
            return self._read().get(key)

    async def put(self, key: str, payload: Payload) -> None:
        async with self._lock:
            data = self._read()
            data[key] = payload
            self._write(data)

    async def delete(self, key: str) -> bool:
        async with self._lock:
            data = self._read()
            if data.pop(key, None) is None:
                return False
            self._write(data)
            return True

    async def keys(self) -> list[str]:
        async with self._lock:
            return list(self._read())

    async def close(self) -> None:
        return None


class SQLiteStorage:
    def __init__(self, path: Path, table: str) -> None:
        self._path = path
        self._table = table
        self._lock = asyncio.Lock()
        path.parent.mkdir(parents=True, exist_ok=True)
        self._initialize()

    def _initialize(self) -> None:
        with sqlite3.connect(self._path) as conn:
            conn.execute(
                f"CREATE TABLE IF NOT EXISTS {self._table} (\n"
                "    key TEXT PRIMARY KEY,\n"
                "    payload TEXT NOT NULL\n"
                ")"
            )
            conn.commit()

    async def get(self, key: str) -> Payload | None:
        async with self._lock:
            row = await asyncio.to_thread(self._fetch_one, key)
        return json.loads(row) if row is not None else None

    def _fetch_one(self, key: str) -> str | None:
        with sqlite3.connect(self._path) as conn:
            cursor = conn.execute(f"SELECT payload FROM {self._table} WHERE key = ?", (key,))
            row = cursor.fetchone()
            return row[0] if row else None

    async def put(self, key: str, payload: Payload) -> None:
        text = json.dumps(payload, ensure_ascii=False)
        async with self._lock:
            await asyncio.to_thread(self._write_one, key, text)

    def _write_one(self, key: str, text: str) -> None:
        with sqlite3.connect(self._path) as conn:
            conn.execute(
                f"INSERT OR REPLACE INTO {self._table} (key, payload) VALUES (?, ?)", (key, text)
            )
            conn.commit()

    async def delete(self, key: str) -> bool:
        async with self._lock:
            return await asyncio.to_thread(self._delete_one, key)

    def _delete_one(self, key: str) -> bool:
        with sqlite3.connect(self._path) as conn:
            cursor = conn.execute(f"DELETE FROM {self._table} WHERE key = ?", (key,))
            conn.commit()
            return cursor.rowcount > 0

    async def keys(self) -> list[str]:
        async with self._lock:
            return await asyncio.to_thread(self._fetch_keys)

    def _fetch_keys(self) -> list[str]:
        with sqlite3.connect(self._path) as conn:
            cursor = conn.execute(f"SELECT key FROM {self._table}")
            return [row[0] for row in cursor.fetchall()]

    async def close(self) -> None:
        return None


class RedisStorage:
    """Hash ``namespace`` in Redis: field = key, value = JSON payload."""

    def __init__(self, url: str, namespace: str, *, client: redis.Redis | None = None) -> None:
        self._url = url
        self._namespace = namespace
        self._redis = client or redis.from_url(url, decode_responses=True)
        logger.info("redis storage namespace=%s url=%s", namespace, url)

    async def get(self, key: str) -> Payload | None:
        raw = await self._redis.hget(self._namespace, key)
        return json.loads(raw) if raw is not None else None

    async def put(self, key: str, payload: Payload) -> None:
        await self._redis.hset(self._namespace, key, json.dumps(payload, ensure_ascii=False))

    async def delete(self, key: str) -> bool:
        return bool(await self._redis.hdel(self._namespace, key))

    async def keys(self) -> list[str]:
        return list(await self._redis.hkeys(self._namespace))

    async def close(self) -> None:
        await self._redis.aclose()
