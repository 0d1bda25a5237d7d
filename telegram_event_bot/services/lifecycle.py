"""Create, join and delete events.

The controller keeps the event record, the public announcement and the
reminder jobs in step. Each read-modify-write on one event runs under that
event's lock; nothing spans the store and the job queue atomically, so a crash
between steps can leave a recoverable mismatch (for example a joined
participant without reminders).
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from aiogram.exceptions import TelegramAPIError

from ..config import BotConfig
from ..errors import (
    AlreadyJoined,
    ChannelUnavailable,
    DeliveryFailure,
    Forbidden,
    NotFound,
    Unauthorized,
)
from ..jobs.scheduler import ReminderScheduler
from ..keyboards.inline import event_controls_for
from ..logging_config import audit
from ..models.event import Event, build_event
from ..utils.locks import KeyedLock
from ..utils.metrics import MetricsCollector
from ..utils.parsing import parse_event_datetime
from ..utils.texts import render_announcement, render_cancellation, render_join_confirmation
from .events import EventStore
from .telegram import TelegramSender

logger = logging.getLogger("telegram_event_bot.services.lifecycle")


@dataclass(slots=True)
class CreatedEvent:
    event: Event
    channel_title: str


class EventLifecycle:
    def __init__(
        self,
        *,
        config: BotConfig,
        events: EventStore,
        scheduler: ReminderScheduler,
        sender: TelegramSender,
        metrics: MetricsCollector,
        locks: KeyedLock | None = None,
    ) -> None:
        self._config = config
        self._events = events
        self._scheduler = scheduler
        self._sender = sender
        self._metrics = metrics
        self._locks = locks or KeyedLock()

    # authorization ----------------------------------------------------
    def is_authorized(self, user_id: int) -> bool:
        return user_id in self._config.authorized_users

    def require_authorized(self, user_id: int, reason: str | None = None) -> None:
        if not self.is_authorized(user_id):
            raise Unauthorized(reason)

    # create -----------------------------------------------------------
    async def create_event(
        self,
        *,
        actor_id: int,
        event_type: str,
        datetime_text: str,
        description: str = "",
    ) -> CreatedEvent:
        self.require_authorized(actor_id)
        date = parse_event_datetime(datetime_text)
        event = build_event(
            event_type=event_type,
            date=date,
            organizer=actor_id,
            description=description,
        )
        channel_id, channel_title = await self._resolve_channel(event.id)

        message = await self._sender.safe_tg_call(
            "ui",
            f"announce:{event.id}",
            self._sender.bot.send_message,
            chat_id=channel_id,
            text=render_announcement(event),
            reply_markup=event_controls_for(event, actor_id),
        )
        event.message_id = message.message_id
        # A failure here leaves a posted announcement without a record.
        await self._events.save(event)
        logger.info("event_created id=%s type=%s date=%s", event.id, event.type, event.date.isoformat())
        audit("EVENT_CREATED", event_id=event.id, organizer=actor_id, date=event.date.isoformat())
        return CreatedEvent(event=event, channel_title=channel_title)

    async def _resolve_channel(self, event_id: str) -> tuple[int, str]:
        channel_id = self._config.event_channel_id
        if channel_id is None:
            logger.error("EVENT_CHANNEL_ID is not configured")
            raise ChannelUnavailable()
        try:
            chat = await self._sender.safe_tg_call(
                "ui",
                f"channel:resolve:{event_id}",
                self._sender.bot.get_chat,
                chat_id=channel_id,
            )
        except (TelegramAPIError, asyncio.TimeoutError) as exc:
            logger.error("event channel %s cannot be resolved: %s", channel_id, exc)
            raise ChannelUnavailable(f"Event channel not found. (ID: {channel_id})") from exc
        title = getattr(chat, "title", None) or getattr(chat, "full_name", None) or str(channel_id)
        return channel_id, title

    # join -------------------------------------------------------------
    async def join_event(self, *, event_id: str, user_id: int) -> Event:
        async with self._locks.hold(event_id):
            event = await self._require_event(event_id)
            if event.has_participant(user_id):
                raise AlreadyJoined()
            event.add_participant(user_id)
            await self._events.save(event)
            planned = self._scheduler.schedule_reminders(event.id, event.date, [user_id])
            # Announcement edits follow the same order as the stored participant list.
            await self.refresh_announcement(event)
        await self._metrics.incr(reminders_scheduled=len(planned))
        logger.info("event_joined id=%s user=%s reminders=%d", event_id, user_id, len(planned))
        audit("EVENT_JOINED", event_id=event_id, user_id=user_id, reminders=len(planned))

        await self._send_private(
            user_id,
            render_join_confirmation(event),
            op_id=f"confirm:{event_id}:{user_id}",
        )
        return event

    async def refresh_announcement(self, event: Event) -> bool:
        if event.message_id is None or self._config.event_channel_id is None:
            return False
        try:
            await self._sender.safe_tg_call(
                "ui",
                f"announce:edit:{event.id}:{len(event.participants)}",
                self._sender.bot.edit_message_text,
                chat_id=self._config.event_channel_id,
                message_id=event.message_id,
                text=render_announcement(event),
                reply_markup=event_controls_for(event, event.organizer),
            )
        except (TelegramAPIError, asyncio.TimeoutError) as exc:
            logger.warning("could not refresh announcement for %s: %s", event.id, exc)
            return False
        return True

    # delete -----------------------------------------------------------
    async def delete_event(self, *, event_id: str, actor_id: int) -> Event:
        async with self._locks.hold(event_id):
            event = await self._require_event(event_id)
            if actor_id != event.organizer:
                raise Forbidden()
            # Reminders stop first so a failed record deletion cannot leave live jobs.
            cancelled = self._scheduler.cancel_event_reminders(event_id)
            await self._metrics.incr(reminders_cancelled=cancelled)
            await self.notify_cancellation(event)
            await self._events.delete(event_id)
        audit("EVENT_DELETED", event_id=event_id, organizer=actor_id, reminders=cancelled)
        await self._remove_announcement(event)
        return event

    async def notify_cancellation(self, event: Event) -> list[int]:
        """Send the cancellation notice to each participant except the organizer.

        Every recipient gets an independent task; the ids that received the
        notice are returned.
        """

        recipients = [user_id for user_id in event.participants if user_id != event.organizer]
        if not recipients:
            return []
        text = render_cancellation(event)
        results = await asyncio.gather(
            *(
                self._send_private(user_id, text, op_id=f"cancel:{event.id}:{user_id}")
                for user_id in recipients
            ),
            return_exceptions=True,
        )
        delivered: list[int] = []
        for user_id, result in zip(recipients, results):
            if isinstance(result, BaseException):
                logger.error("cancellation notice to %s crashed", user_id, exc_info=result)
            elif result:
                delivered.append(user_id)
        return delivered

    async def _remove_announcement(self, event: Event) -> None:
        if event.message_id is None or self._config.event_channel_id is None:
            return
        try:
            await self._sender.safe_tg_call(
                "ui",
                f"announce:delete:{event.id}",
                self._sender.bot.delete_message,
                chat_id=self._config.event_channel_id,
                message_id=event.message_id,
            )
        except (TelegramAPIError, asyncio.TimeoutError) as exc:
            logger.warning("could not delete announcement for %s: %s", event.id, exc)

    # debug ------------------------------------------------------------
    async def list_events(self, *, actor_id: int) -> list[Event]:
        self.require_authorized(actor_id, "You are not authorized to use this command.")
        return await self._events.list_events()

    async def purge_events(self, *, actor_id: int) -> int:
        """Drop every stored event and its reminders. Announcements are left in place."""

        self.require_authorized(actor_id, "You are not authorized to use this command.")
        purged = 0
        for event_id in await self._events.list_ids():
            async with self._locks.hold(event_id):
                await self._events.delete(event_id)
                cancelled = self._scheduler.cancel_event_reminders(event_id)
            await self._metrics.incr(reminders_cancelled=cancelled)
            purged += 1
        logger.info("all events purged count=%d", purged)
        audit("PURGE", actor_id=actor_id, count=purged)
        return purged

    # startup ----------------------------------------------------------
    async def rehydrate_reminders(self) -> int:
        """Re-create future reminder jobs for every stored event.

        The job queue is in memory; job ids are stable, so running this on an
        already populated queue replaces jobs instead of duplicating them.
        """

        total = 0
        for event in await self._events.list_events():
            planned = self._scheduler.schedule_reminders(event.id, event.date, event.participants)
            total += len(planned)
        await self._metrics.incr(reminders_scheduled=total)
        logger.info("rehydrated %d reminder jobs", total)
        return total

    # helpers ----------------------------------------------------------
    async def _require_event(self, event_id: str) -> Event:
        event = await self._events.get(event_id)
        if event is None:
            raise NotFound()
        return event

    async def _send_private(self, user_id: int, text: str, *, op_id: str) -> bool:
        try:
            await self._sender.send_direct(user_id, text, op_id=op_id)
        except DeliveryFailure as exc:
            logger.warning("could not send direct message to %s: %s", user_id, exc.__cause__ or exc)
            await self._metrics.incr(delivery_failures=1)
            return False
        return True

