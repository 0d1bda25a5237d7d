import sys
from datetime import timedelta
from pathlib import Path
from types import SimpleNamespace

import pytest
from aiogram.exceptions import TelegramBadRequest, TelegramForbiddenError
from apscheduler.schedulers.asyncio import AsyncIOScheduler

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from telegram_event_bot.config import BotConfig, NetworkConfig  # noqa: E402
from telegram_event_bot.jobs.scheduler import ReminderScheduler  # noqa: E402
from telegram_event_bot.services.events import EventStore  # noqa: E402
from telegram_event_bot.services.lifecycle import EventLifecycle  # noqa: E402
from telegram_event_bot.services.reminders import ReminderService  # noqa: E402
from telegram_event_bot.services.telegram import TelegramSender  # noqa: E402
from telegram_event_bot.storage.base import JsonStorage  # noqa: E402
from telegram_event_bot.utils.datetime import now_utc  # noqa: E402
from telegram_event_bot.utils.metrics import MetricsCollector  # noqa: E402

CHANNEL_ID = -1001234567890
ORGANIZER = 1
OTHER_ORGANIZER = 2


class FakeBot(SimpleNamespace):
    """Records Bot API calls; selected chats can be made to fail."""

    def __init__(self, *, channel_exists: bool = True):
        super().__init__()
        self.channel_exists = channel_exists
        self.blocked_users: set[int] = set()
        self.sent_messages: list[dict] = []
        self.edited_messages: list[dict] = []
        self.deleted_messages: list[dict] = []
        self._next_message_id = 100

    async def get_chat(self, chat_id, **kwargs):
        if not self.channel_exists:
            raise TelegramBadRequest(method=None, message="Bad Request: chat not found")
        return SimpleNamespace(id=chat_id, title="Events", full_name="Events")

    async def send_message(self, chat_id, text, **kwargs):
        if chat_id in self.blocked_users:
            raise TelegramForbiddenError(method=None, message="Forbidden: bot was blocked by the user")
        self._next_message_id += 1
        record = dict(chat_id=chat_id, text=text, message_id=self._next_message_id, **kwargs)
        self.sent_messages.append(record)
        return SimpleNamespace(message_id=self._next_message_id, chat=SimpleNamespace(id=chat_id))

    async def edit_message_text(self, **kwargs):
        self.edited_messages.append(kwargs)
        return True

    async def delete_message(self, **kwargs):
        self.deleted_messages.append(kwargs)
        return True

    def messages_to(self, chat_id):
        return [message for message in self.sent_messages if message["chat_id"] == chat_id]


@pytest.fixture
def bot_config(tmp_path):
    return BotConfig(
        token="test",
        data_dir=tmp_path / "data",
        logs_dir=tmp_path / "logs",
        event_channel_id=CHANNEL_ID,
        authorized_users=(ORGANIZER, OTHER_ORGANIZER),
    )


@pytest.fixture
def harness(bot_config):
    metrics = MetricsCollector()
    bot = FakeBot()
    sender = TelegramSender(bot=bot, network=NetworkConfig(), metrics=metrics)
    events = EventStore(JsonStorage(bot_config.data_dir / "events.json"))
    # Never started: jobs stay pending and can be inspected.
    scheduler = ReminderScheduler(metrics=metrics, scheduler=AsyncIOScheduler(timezone="UTC"))
    reminders = ReminderService(events=events, sender=sender, metrics=metrics)
    scheduler.bind(reminders.deliver)
    lifecycle = EventLifecycle(
        config=bot_config,
        events=events,
        scheduler=scheduler,
        sender=sender,
        metrics=metrics,
    )
    return SimpleNamespace(
        config=bot_config,
        metrics=metrics,
        bot=bot,
        sender=sender,
        events=events,
        scheduler=scheduler,
        reminders=reminders,
        lifecycle=lifecycle,
    )


def future_text(hours: float) -> str:
    return (now_utc() + timedelta(hours=hours)).strftime("%Y-%m-%d %H:%M")
