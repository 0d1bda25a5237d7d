from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Dict

from aiogram import BaseMiddleware
from aiogram.types import CallbackQuery

from ...locales import DEFAULT_LANGUAGE, get_text
from ...logging_config import audit
from ...services.telegram import TelegramSender
from ...utils import locks


class CallbackGuardMiddleware(BaseMiddleware):
    """Drops a repeated press of the same button by the same user.

    Other users pressing the same button are not affected.
    """

    def __init__(self, guard: locks.ClickGuard, sender: TelegramSender) -> None:
        self._guard = guard
        self._sender = sender
        self._pending: set[asyncio.Task] = set()

    async def __call__(
        self,
        handler: Callable[[CallbackQuery, Dict[str, Any]], Awaitable[Any]],
        event: CallbackQuery,
        data: Dict[str, Any],
    ) -> Any:
        key = (event.from_user.id, event.data)
        accepted = await self._guard.acquire(key)
        if not accepted:
            audit("CLICK_DEDUP", user_id=event.from_user.id, data=event.data)
            await self._sender.safe_tg_call(
                "ui",
                f"cb:dedup:{event.id}",
                event.answer,
                get_text(DEFAULT_LANGUAGE, "already_processing"),
                show_alert=False,
            )
            return None
        try:
            return await handler(event, data)
        finally:
            task = asyncio.create_task(self._guard.release_later(key))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
