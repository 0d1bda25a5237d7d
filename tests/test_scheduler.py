import asyncio
from datetime import datetime, timedelta, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from telegram_event_bot.jobs.scheduler import (
    REMINDER_TIERS,
    ReminderScheduler,
    plan_reminders,
    reminder_job_id,
)
from telegram_event_bot.utils.datetime import to_epoch_ms
from telegram_event_bot.utils.metrics import MetricsCollector

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def _scheduler():
    return ReminderScheduler(metrics=MetricsCollector(), scheduler=AsyncIOScheduler(timezone="UTC"))


def test_tiers_are_24_12_and_1_hours():
    assert [tier.label for tier in REMINDER_TIERS] == ["24 hours", "12 hours", "1 hour"]
    assert [tier.offset for tier in REMINDER_TIERS] == [timedelta(hours=24), timedelta(hours=12), timedelta(hours=1)]


def test_plan_all_tiers_for_distant_event():
    event_date = NOW + timedelta(hours=48)
    jobs = plan_reminders("event_1", event_date, [10], now=NOW)
    assert [job.reminder_type for job in jobs] == ["24 hours", "12 hours", "1 hour"]
    assert [job.fire_at for job in jobs] == [
        event_date - timedelta(hours=24),
        event_date - timedelta(hours=12),
        event_date - timedelta(hours=1),
    ]
    assert jobs[0].delay == timedelta(hours=24)
    assert jobs[0].payload() == {
        "event_id": "event_1",
        "participant_id": 10,
        "reminder_type": "24 hours",
        "event_date": to_epoch_ms(event_date),
    }


def test_plan_skips_tiers_already_past():
    jobs = plan_reminders("event_1", NOW + timedelta(hours=20), [10], now=NOW)
    assert [job.reminder_type for job in jobs] == ["12 hours", "1 hour"]

    assert [job.reminder_type for job in plan_reminders("event_1", NOW + timedelta(minutes=30), [10], now=NOW)] == []


def test_plan_tier_firing_exactly_now_is_skipped():
    jobs = plan_reminders("event_1", NOW + timedelta(hours=12), [10], now=NOW)
    assert [job.reminder_type for job in jobs] == ["1 hour"]


def test_plan_covers_every_participant():
    jobs = plan_reminders("event_1", NOW + timedelta(hours=48), [10, 11], now=NOW)
    assert len(jobs) == 6
    assert {job.participant_id for job in jobs} == {10, 11}


def test_schedule_registers_jobs_and_index():
    scheduler = _scheduler()
    event_date = NOW + timedelta(hours=48)
    planned = scheduler.schedule_reminders("event_1", event_date, [10], now=NOW)
    assert len(planned) == 3
    job_id = reminder_job_id("event_1", 10, "12 hours")
    assert job_id == "reminder:event_1:10:12 hours"
    job = scheduler.get_job(job_id)
    assert job is not None
    assert job.kwargs["participant_id"] == 10
    assert job.trigger.run_date == event_date - timedelta(hours=12)
    assert scheduler.pending_job_ids("event_1") == {planned_job.job_id for planned_job in planned}


def test_rescheduling_same_participant_does_not_duplicate():
    scheduler = _scheduler()
    event_date = NOW + timedelta(hours=48)
    scheduler.schedule_reminders("event_1", event_date, [10], now=NOW)
    scheduler.schedule_reminders("event_1", event_date, [10], now=NOW)
    assert len(scheduler.pending_job_ids("event_1")) == 3
    assert len({job.id for job in scheduler.pending_jobs()}) == 3


def test_cancel_removes_only_that_events_jobs():
    scheduler = _scheduler()
    scheduler.schedule_reminders("event_1", NOW + timedelta(hours=48), [10, 11], now=NOW)
    scheduler.schedule_reminders("event_2", NOW + timedelta(hours=48), [10], now=NOW)

    assert scheduler.cancel_event_reminders("event_1") == 6
    assert scheduler.pending_job_ids("event_1") == set()
    assert {job.kwargs["event_id"] for job in scheduler.pending_jobs()} == {"event_2"}
    assert scheduler.cancel_event_reminders("event_1") == 0


def test_cancel_tolerates_jobs_already_gone():
    aps = AsyncIOScheduler(timezone="UTC")
    scheduler = ReminderScheduler(metrics=MetricsCollector(), scheduler=aps)
    scheduler.schedule_reminders("event_1", NOW + timedelta(hours=48), [10], now=NOW)
    aps.remove_job(reminder_job_id("event_1", 10, "24 hours"))
    assert scheduler.cancel_event_reminders("event_1") == 2


def test_fire_calls_handler_and_drops_index_entry():
    async def scenario():
        scheduler = _scheduler()
        calls = []

        async def handler(**payload):
            calls.append(payload)

        scheduler.bind(handler)
        planned = scheduler.schedule_reminders("event_1", NOW + timedelta(hours=2), [10], now=NOW)
        assert [job.reminder_type for job in planned] == ["1 hour"]
        await scheduler._fire(**planned[0].payload())
        assert calls == [planned[0].payload()]
        assert scheduler.pending_job_ids("event_1") == set()

    asyncio.run(scenario())


def test_fire_swallows_handler_errors():
    async def scenario():
        scheduler = _scheduler()

        async def handler(**payload):
            raise RuntimeError("boom")

        scheduler.bind(handler)
        await scheduler._fire(event_id="event_1", participant_id=10, reminder_type="1 hour", event_date=0)

    asyncio.run(scenario())
