from __future__ import annotations

import logging

from ..errors import DeliveryFailure
from ..logging_config import audit
from ..utils.datetime import from_epoch_ms
from ..utils.metrics import MetricsCollector
from ..utils.texts import render_reminder
from .events import EventStore
from .telegram import TelegramSender

logger = logging.getLogger("telegram_event_bot.services.reminders")


class ReminderService:
    """Delivers a due reminder after re-checking the event it belongs to.

    A reminder for an event that no longer exists, or for a user who is no
    longer a participant, completes silently. Delivery errors are logged and
    the job still completes; nothing is retried at this level.
    """

    def __init__(
        self,
        *,
        events: EventStore,
        sender: TelegramSender,
        metrics: MetricsCollector,
    ) -> None:
        self._events = events
        self._sender = sender
        self._metrics = metrics

    async def deliver(
        self,
        *,
        event_id: str,
        participant_id: int,
        reminder_type: str,
        event_date: int,
    ) -> bool:
        event = await self._events.get(event_id)
        if event is None:
            logger.info("event %s no longer exists, skipping reminder", event_id)
            await self._skip(event_id, participant_id, "event_missing")
            return False
        if not event.has_participant(participant_id):
            logger.info("user %s no longer participating in %s, skipping reminder", participant_id, event_id)
            await self._skip(event_id, participant_id, "not_participant")
            return False

        text = render_reminder(event, reminder_type, from_epoch_ms(event_date))
        try:
            await self._sender.send_direct(
                participant_id,
                text,
                op_id=f"reminder:{event_id}:{participant_id}:{reminder_type}",
            )
        except DeliveryFailure as exc:
            logger.warning(
                "failed to send reminder to %s for event %s: %s", participant_id, event_id, exc.__cause__ or exc
            )
            await self._metrics.incr(delivery_failures=1)
            return False

        await self._metrics.incr(reminders_fired=1)
        audit("REM_FIRED", event_id=event_id, participant_id=participant_id, reminder=reminder_type)
        return True

    async def _skip(self, event_id: str, participant_id: int, reason: str) -> None:
        await self._metrics.incr(reminders_skipped=1)
        audit("REM_SKIPPED", event_id=event_id, participant_id=participant_id, reason=reason)
