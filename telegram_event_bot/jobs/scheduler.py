from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Iterable

from apscheduler.events import EVENT_JOB_MISSED, JobExecutionEvent
from apscheduler.job import Job
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from ..logging_config import audit
from ..utils.datetime import ensure_utc, now_utc, to_epoch_ms
from ..utils.metrics import SUMMARY_WINDOW, MetricsCollector

logger = logging.getLogger("telegram_event_bot.jobs.scheduler")

QUEUE_NAME = "event-reminders"
JOB_PREFIX = "reminder"

ReminderHandler = Callable[..., Awaitable[Any]]


@dataclass(frozen=True, slots=True)
class ReminderTier:
    label: str
    offset: timedelta


REMINDER_TIERS: tuple[ReminderTier, ...] = (
    ReminderTier("24 hours", timedelta(hours=24)),
    ReminderTier("12 hours", timedelta(hours=12)),
    ReminderTier("1 hour", timedelta(hours=1)),
)


def reminder_job_id(event_id: str, participant_id: int, label: str) -> str:
    return f"{JOB_PREFIX}:{event_id}:{participant_id}:{label}"


@dataclass(frozen=True, slots=True)
class ReminderJob:
    event_id: str
    participant_id: int
    reminder_type: str
    event_date: int
    fire_at: datetime
    delay: timedelta

    @property
    def job_id(self) -> str:
        return reminder_job_id(self.event_id, self.participant_id, self.reminder_type)

    def payload(self) -> dict[str, Any]:
        return {
            "event_id": self.event_id,
            "participant_id": self.participant_id,
            "reminder_type": self.reminder_type,
            "event_date": self.event_date,
        }


def plan_reminders(
    event_id: str,
    event_date: datetime,
    participant_ids: Iterable[int],
    *,
    now: datetime | None = None,
    tiers: Iterable[ReminderTier] = REMINDER_TIERS,
) -> list[ReminderJob]:
    """Return one job per participant and per tier whose fire time is still ahead.

    Tiers already in the past are skipped; there is no catch-up reminder.
    """

    now = now or now_utc()
    event_date = ensure_utc(event_date)
    tiers = tuple(tiers)
    jobs: list[ReminderJob] = []
    for participant_id in participant_ids:
        for tier in tiers:
            fire_at = event_date - tier.offset
            if fire_at <= now:
                continue
            jobs.append(
                ReminderJob(
                    event_id=event_id,
                    participant_id=participant_id,
                    reminder_type=tier.label,
                    event_date=to_epoch_ms(event_date),
                    fire_at=fire_at,
                    delay=fire_at - now,
                )
            )
    return jobs


class ReminderScheduler:
    """One-shot reminder jobs on an APScheduler ``AsyncIOScheduler``.

    Jobs live in the in-memory job store and are discarded once they run,
    whatever the outcome. An index from event id to job ids is kept so that
    cancelling an event does not scan the queue.
    """

    def __init__(
        self,
        *,
        metrics: MetricsCollector,
        misfire_grace_seconds: int = 300,
        scheduler: AsyncIOScheduler | None = None,
    ) -> None:
        self._scheduler = scheduler or AsyncIOScheduler(timezone="UTC")
        self._metrics = metrics
        self._misfire_grace = misfire_grace_seconds
        self._handler: ReminderHandler | None = None
        self._index: dict[str, set[str]] = {}
        self._scheduler.add_listener(self._on_job_missed, EVENT_JOB_MISSED)

    def bind(self, handler: ReminderHandler) -> None:
        """Set the coroutine invoked with the job payload when a reminder is due."""

        self._handler = handler

    async def start(self) -> None:
        self._scheduler.add_job(
            self._metrics.log_summary,
            "interval",
            seconds=SUMMARY_WINDOW,
            id="metrics-summary",
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        self._scheduler.start()
        logger.info("scheduler started queue=%s", QUEUE_NAME)

    async def shutdown(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)

    def schedule_reminders(
        self,
        event_id: str,
        event_date: datetime,
        participant_ids: Iterable[int],
        *,
        now: datetime | None = None,
    ) -> list[ReminderJob]:
        planned = plan_reminders(event_id, event_date, participant_ids, now=now)
        for job in planned:
            self._scheduler.add_job(
                self._fire,
                trigger="date",
                run_date=job.fire_at,
                id=job.job_id,
                name=f"{QUEUE_NAME}:{job.reminder_type}",
                kwargs=job.payload(),
                misfire_grace_time=self._misfire_grace,
                replace_existing=True,
            )
            self._index.setdefault(event_id, set()).add(job.job_id)
            audit("REM_SCHEDULED", job_id=job.job_id, fire_at=job.fire_at.isoformat())
        logger.info("scheduled %d reminders for event %s", len(planned), event_id)
        return planned

    def cancel_event_reminders(self, event_id: str) -> int:
        removed = 0
        for job_id in self._index.pop(event_id, set()):
            try:
                self._scheduler.remove_job(job_id)
            except JobLookupError:
                continue
            removed += 1
        audit("REM_CANCELED", event_id=event_id, jobs=removed)
        return removed

    def pending_job_ids(self, event_id: str | None = None) -> set[str]:
        if event_id is not None:
            return set(self._index.get(event_id, set()))
        return {job_id for job_ids in self._index.values() for job_id in job_ids}

    def get_job(self, job_id: str) -> Job | None:
        return self._scheduler.get_job(job_id)

    def pending_jobs(self) -> list[Job]:
        return [job for job in self._scheduler.get_jobs() if job.id.startswith(f"{JOB_PREFIX}:")]

    async def _fire(
        self,
        *,
        event_id: str,
        participant_id: int,
        reminder_type: str,
        event_date: int,
    ) -> None:
        self._discard(event_id, reminder_job_id(event_id, participant_id, reminder_type))
        if self._handler is None:
            logger.warning("no reminder handler bound, dropping reminder for event %s", event_id)
            return
        try:
            await self._handler(
                event_id=event_id,
                participant_id=participant_id,
                reminder_type=reminder_type,
                event_date=event_date,
            )
        except Exception:
            logger.exception("reminder job failed event=%s participant=%s", event_id, participant_id)

    def _on_job_missed(self, event: JobExecutionEvent) -> None:
        if not event.job_id.startswith(f"{JOB_PREFIX}:"):
            return
        _, event_id, _rest = event.job_id.split(":", 2)
        self._discard(event_id, event.job_id)
        logger.warning("reminder missed job_id=%s scheduled=%s", event.job_id, event.scheduled_run_time)

    def _discard(self, event_id: str, job_id: str) -> None:
        job_ids = self._index.get(event_id)
        if job_ids is None:
            return
        job_ids.discard(job_id)
        if not job_ids:
            self._index.pop(event_id, None)
