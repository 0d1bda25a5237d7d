from __future__ import annotations

import logging

from aiogram import F, Router
from aiogram.filters import Command, CommandObject
from aiogram.types import CallbackQuery, Message
from aiogram.utils.text_decorations import html_decoration

from ..errors import EventBotError
from ..keyboards.inline import DELETE, PARTICIPATE, parse_event_action
from ..locales import DEFAULT_LANGUAGE, get_text
from ..services.lifecycle import EventLifecycle
from ..services.telegram import TelegramSender
from ..utils.parsing import parse_create_args

logger = logging.getLogger("telegram_event_bot.routers.events")

router = Router()


async def reply(message: Message, sender: TelegramSender, op: str, text: str) -> None:
    await sender.safe_tg_call(
        "ui",
        f"{op}:{message.chat.id}:{message.message_id}",
        message.reply,
        text,
    )


async def alert(callback: CallbackQuery, sender: TelegramSender, op: str, text: str) -> None:
    await sender.safe_tg_call(
        "ui",
        f"{op}:{callback.id}",
        callback.answer,
        text,
        show_alert=True,
    )


@router.message(Command("create_event"))
async def handle_create_event(
    message: Message,
    command: CommandObject,
    lifecycle: EventLifecycle,
    telegram_sender: TelegramSender,
) -> None:
    actor_id = message.from_user.id
    try:
        args = parse_create_args(command.args)
        created = await lifecycle.create_event(
            actor_id=actor_id,
            event_type=args.event_type,
            datetime_text=args.datetime_text,
            description=args.description,
        )
    except EventBotError as exc:
        logger.info("create_event rejected for %s: %s", actor_id, exc.reason)
        await reply(message, telegram_sender, "create:error", f"❌ {html_decoration.quote(exc.reason)}")
        return
    except Exception:
        logger.exception("create_event failed for %s", actor_id)
        await reply(message, telegram_sender, "create:error", get_text(DEFAULT_LANGUAGE, "error_generic"))
        return
    await reply(
        message,
        telegram_sender,
        "create:ok",
        get_text(DEFAULT_LANGUAGE, "event_created", channel=html_decoration.quote(created.channel_title)),
    )


@router.callback_query(F.data.startswith(f"{PARTICIPATE}_") | F.data.startswith(f"{DELETE}_"))
async def handle_event_action(
    callback: CallbackQuery,
    lifecycle: EventLifecycle,
    telegram_sender: TelegramSender,
) -> None:
    parsed = parse_event_action(callback.data)
    if parsed is None:
        await alert(callback, telegram_sender, "event:unknown", get_text(DEFAULT_LANGUAGE, "error_generic"))
        return
    action, event_id = parsed
    user_id = callback.from_user.id
    try:
        if action == PARTICIPATE:
            await lifecycle.join_event(event_id=event_id, user_id=user_id)
            text = get_text(DEFAULT_LANGUAGE, "event_joined")
        else:
            await lifecycle.delete_event(event_id=event_id, actor_id=user_id)
            text = get_text(DEFAULT_LANGUAGE, "event_deleted")
    except EventBotError as exc:
        logger.info("%s on %s rejected for %s: %s", action, event_id, user_id, exc.reason)
        await alert(callback, telegram_sender, f"event:{action}:error", f"❌ {exc.reason}")
        return
    except Exception:
        logger.exception("%s on %s failed for %s", action, event_id, user_id)
        await alert(callback, telegram_sender, f"event:{action}:error", get_text(DEFAULT_LANGUAGE, "error_generic"))
        return
    await alert(callback, telegram_sender, f"event:{action}:ok", text)
