from __future__ import annotations

import asyncio
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Dict, Hashable


@dataclass
class ClickState:
    expires_at: float


class ClickGuard:
    """Drops repeated presses of the same control by the same user."""

    def __init__(self, window: float = 3.0) -> None:
        self._window = window
        self._locks: Dict[Hashable, ClickState] = {}
        self._lock = asyncio.Lock()

    async def acquire(self, key: Hashable) -> bool:
        async with self._lock:
            now = time.monotonic()
            state = self._locks.get(key)
            if state and state.expires_at > now:
                return False
            self._locks[key] = ClickState(expires_at=now + self._window)
            return True

    async def release(self, key: Hashable) -> None:
        async with self._lock:
            self._locks.pop(key, None)

    async def release_later(self, key: Hashable) -> None:
        await asyncio.sleep(self._window)
        await self.release(key)


class KeyedLock:
    """One ``asyncio.Lock`` per key, dropped once nobody holds or waits on it."""

    def __init__(self) -> None:
        self._locks: Dict[Hashable, asyncio.Lock] = {}
        self._users: Dict[Hashable, int] = {}

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if not self._users[key]:
                self._users.pop(key, None)
                self._locks.pop(key, None)

    def locked(self, key: Hashable) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        return len(self._locks)
