"""Task reminder scheduling for taskmanager."""

from taskmanager.reminders.triggers import compute_triggers, notification_id_for_task, notification_ids_for_task
from taskmanager.reminders.scheduler import ReminderScheduler, get_reminder_scheduler, shutdown_reminder_scheduler

__all__ = [
    "compute_triggers",
    "notification_id_for_task",
    "notification_ids_for_task",
    "ReminderScheduler",
    "get_reminder_scheduler",
    "shutdown_reminder_scheduler",
]
