"""Reminder job queue."""

from .scheduler import REMINDER_TIERS, ReminderJob, ReminderScheduler, plan_reminders

__all__ = ["REMINDER_TIERS", "ReminderJob", "ReminderScheduler", "plan_reminders"]
