from __future__ import annotations

import logging

from aiogram import Router
from aiogram.filters import Command
from aiogram.types import Message

from ..errors import Unauthorized
from ..locales import DEFAULT_LANGUAGE, get_text
from ..services.lifecycle import EventLifecycle
from ..services.telegram import TelegramSender
from ..utils.texts import render_event_list
from .events import reply

logger = logging.getLogger("telegram_event_bot.routers.admin")

router = Router()


@router.message(Command("list_events"))
async def handle_list_events(
    message: Message,
    lifecycle: EventLifecycle,
    telegram_sender: TelegramSender,
) -> None:
    try:
        events = await lifecycle.list_events(actor_id=message.from_user.id)
    except Unauthorized:
        await reply(message, telegram_sender, "admin:list:denied", get_text(DEFAULT_LANGUAGE, "command_denied"))
        return
    await reply(message, telegram_sender, "admin:list", render_event_list(events))


@router.message(Command("purge_events"))
async def handle_purge_events(
    message: Message,
    lifecycle: EventLifecycle,
    telegram_sender: TelegramSender,
) -> None:
    try:
        purged = await lifecycle.purge_events(actor_id=message.from_user.id)
    except Unauthorized:
        await reply(message, telegram_sender, "admin:purge:denied", get_text(DEFAULT_LANGUAGE, "command_denied"))
        return
    logger.warning("user %s purged %d events", message.from_user.id, purged)
    await reply(message, telegram_sender, "admin:purge", get_text(DEFAULT_LANGUAGE, "purge_done"))
