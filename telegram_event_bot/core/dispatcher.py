from __future__ import annotations

import logging

from aiogram import Dispatcher
from aiogram.types import ErrorEvent

from ..routers import admin, events, fun, start

logger = logging.getLogger("telegram_event_bot.core.dispatcher")


async def log_unhandled(event: ErrorEvent) -> bool:
    logger.error("unhandled error in update %s", event.update.update_id, exc_info=event.exception)
    return True


def create_dispatcher() -> Dispatcher:
    dp = Dispatcher()
    dp.include_router(start.router)
    dp.include_router(events.router)
    dp.include_router(admin.router)
    dp.include_router(fun.router)
    dp.errors.register(log_unhandled)
    return dp
