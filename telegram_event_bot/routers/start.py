from __future__ import annotations

from aiogram import Router
from aiogram.filters import Command, CommandStart
from aiogram.types import Message

from ..locales import DEFAULT_LANGUAGE, get_text
from ..models.event import EVENT_TYPES
from ..services.telegram import TelegramSender

router = Router()


def help_text(language: str = DEFAULT_LANGUAGE) -> str:
    types = ", ".join(f"<code>{value}</code>" for value in EVENT_TYPES)
    return get_text(language, "help", types=types)


@router.message(CommandStart())
async def handle_start(message: Message, telegram_sender: TelegramSender) -> None:
    await telegram_sender.safe_tg_call(
        "ui",
        f"start:answer:{message.chat.id}:{message.message_id}",
        message.answer,
        get_text(DEFAULT_LANGUAGE, "start"),
    )


@router.message(Command("help"))
async def handle_help(message: Message, telegram_sender: TelegramSender) -> None:
    await telegram_sender.safe_tg_call(
        "ui",
        f"help:answer:{message.chat.id}:{message.message_id}",
        message.answer,
        help_text(),
    )
