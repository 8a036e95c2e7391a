"""Reminder trigger data models for taskmanager."""

from datetime import datetime
from enum import Enum
from pydantic import BaseModel, Field


class ReminderKind(str, Enum):
    """Which of a task's two triggers this is."""
    REMIND_BEFORE = "remind_before"
    EXPIRED = "expired"


class ScheduledNotification(BaseModel):
    """A local notification request as the notifier sees it."""

    notification_id: int = Field(..., description="Integer notification id")
    title: str = Field(..., description="Notification title")
    body: str = Field(..., description="Notification body")
    fire_at: datetime = Field(..., description="Trigger timestamp (naive UTC)")


class ReminderTrigger(ScheduledNotification):
    """One of the two reminder triggers derived from a task.

    Derived from the task's identity and due date; never persisted.
    """

    kind: ReminderKind = Field(..., description="Pre-due reminder or due-time expiry")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True
