"""Data models for taskmanager."""

from taskmanager.models.task import Task, TaskPriority, TaskCategory
from taskmanager.models.reminder import ReminderTrigger, ReminderKind, ScheduledNotification
from taskmanager.models.user import User

__all__ = [
    "Task",
    "TaskPriority",
    "TaskCategory",
    "ReminderTrigger",
    "ReminderKind",
    "ScheduledNotification",
    "User",
]
