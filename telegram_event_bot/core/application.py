from __future__ import annotations

import logging
from contextlib import suppress

from aiogram import Bot
from aiogram.client.default import DefaultBotProperties
from aiogram.exceptions import TelegramAPIError
from aiogram.types import BotCommand

from ..config import Config
from ..jobs.scheduler import ReminderScheduler
from ..logging_config import setup_logging
from ..services.events import EventStore
from ..services.lifecycle import EventLifecycle
from ..services.reminders import ReminderService
from ..services.telegram import TelegramSender
from ..utils.locks import ClickGuard
from ..utils.metrics import MetricsCollector
from .dispatcher import create_dispatcher
from .middlewares.callback_guard import CallbackGuardMiddleware
from .middlewares.context import ContextMiddleware

logger = logging.getLogger("telegram_event_bot.core.application")

BOT_COMMANDS = (
    BotCommand(command="create_event", description="Announce a new event"),
    BotCommand(command="roll", description="Roll dice"),
    BotCommand(command="pvp", description="PvP Malmstone calculator"),
    BotCommand(command="list_events", description="List stored events (organizers)"),
    BotCommand(command="purge_events", description="Delete all events (organizers)"),
    BotCommand(command="help", description="Show help"),
)


class Application:
    """Owns the bot, the services built from ``Config`` and the polling loop."""

    def __init__(self, *, config: Config) -> None:
        self._config = config
        config.bot.data_dir.mkdir(parents=True, exist_ok=True)
        config.bot.logs_dir.mkdir(parents=True, exist_ok=True)
        setup_logging(config.bot.logs_dir)

        self._bot = Bot(token=config.bot.token, default=DefaultBotProperties(parse_mode="HTML"))
        self._metrics = MetricsCollector()
        self._sender = TelegramSender(bot=self._bot, network=config.network, metrics=self._metrics)
        self._events = EventStore.from_config(config.bot)
        self._scheduler = ReminderScheduler(
            metrics=self._metrics,
            misfire_grace_seconds=config.bot.misfire_grace_seconds,
        )
        self._reminders = ReminderService(events=self._events, sender=self._sender, metrics=self._metrics)
        self._scheduler.bind(self._reminders.deliver)
        self._lifecycle = EventLifecycle(
            config=config.bot,
            events=self._events,
            scheduler=self._scheduler,
            sender=self._sender,
            metrics=self._metrics,
        )
        self._guard = ClickGuard(window=config.bot.click_window_seconds)
        self._dispatcher = create_dispatcher()
        context = ContextMiddleware(lifecycle=self._lifecycle, telegram_sender=self._sender)
        self._dispatcher.message.middleware.register(context)
        self._dispatcher.callback_query.middleware.register(
            CallbackGuardMiddleware(self._guard, self._sender)
        )
        self._dispatcher.callback_query.middleware.register(context)

    async def run(self) -> None:
        await self._scheduler.start()
        try:
            await self._lifecycle.rehydrate_reminders()
            await self._register_commands()
            await self._dispatcher.start_polling(self._bot)
        finally:
            with suppress(Exception):
                await self._scheduler.shutdown()
            await self._events.close()
            await self._bot.session.close()

    async def _register_commands(self) -> None:
        try:
            await self._bot.set_my_commands(list(BOT_COMMANDS))
        except TelegramAPIError as exc:
            logger.warning("could not register bot commands: %s", exc)
