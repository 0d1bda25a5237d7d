from __future__ import annotations

import asyncio
import logging

from aiogram import Router
from aiogram.filters import Command, CommandObject
from aiogram.types import Message
from aiogram.utils.text_decorations import html_decoration

from ..errors import EventBotError
from ..locales import DEFAULT_LANGUAGE, get_text
from ..services.telegram import TelegramSender
from ..utils.dice import ANIMATION_FRAMES, format_roll, roll_dice, rolling_frame
from ..utils.parsing import parse_int_args
from ..utils.pvp import calculate_pvp_xp, format_pvp_requirements
from .events import reply

logger = logging.getLogger("telegram_event_bot.routers.fun")

router = Router()

FRAME_DELAY = 0.3
SETTLE_DELAY = 0.5


@router.message(Command("roll"))
async def handle_roll(message: Message, command: CommandObject, telegram_sender: TelegramSender) -> None:
    try:
        values = parse_int_args(command.args, ("sides", "count"))
        sides = values[0] if values else 6
        count = values[1] if len(values) > 1 else 1
        result = roll_dice(sides, count)
    except EventBotError as exc:
        await reply(message, telegram_sender, "roll:error", f"❌ {html_decoration.quote(exc.reason)}")
        return

    op = f"roll:{message.chat.id}:{message.message_id}"
    try:
        sent = await telegram_sender.safe_tg_call(
            "ui", f"{op}:0", message.reply, rolling_frame(sides, count, 0)
        )
        if sent is None:
            return
        for frame in range(1, len(ANIMATION_FRAMES)):
            await asyncio.sleep(FRAME_DELAY)
            await telegram_sender.safe_tg_call(
                "ui", f"{op}:{frame}", sent.edit_text, rolling_frame(sides, count, frame)
            )
        await asyncio.sleep(SETTLE_DELAY)
        await telegram_sender.safe_tg_call("ui", f"{op}:result", sent.edit_text, format_roll(result))
    except Exception:
        logger.exception("dice roll failed")
        await reply(message, telegram_sender, "roll:failed", "❌ Sorry, something went wrong with the dice roll!")
        return
    logger.info("dice roll %dd%d = %s (total: %d)", count, sides, result.rolls, result.total)


@router.message(Command("pvp"))
async def handle_pvp(message: Message, command: CommandObject, telegram_sender: TelegramSender) -> None:
    try:
        values = parse_int_args(
            command.args, ("current_level", "goal_level", "current_progress"), required=2
        )
        result = calculate_pvp_xp(*values)
    except EventBotError as exc:
        text = f"❌ Error calculating PvP requirements!\n{html_decoration.quote(exc.reason)}"
        await reply(message, telegram_sender, "pvp:error", text)
        return
    except Exception:
        logger.exception("pvp calculation failed")
        await reply(message, telegram_sender, "pvp:error", get_text(DEFAULT_LANGUAGE, "error_generic"))
        return
    logger.info(
        "pvp calculator %d -> %d progress=%d xp_needed=%d",
        result.current_level,
        result.goal_level,
        result.current_progress,
        result.exp_needed,
    )
    await reply(message, telegram_sender, "pvp", format_pvp_requirements(result))
