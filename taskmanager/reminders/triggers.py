"""Reminder trigger computation for taskmanager.

Every task owns exactly two trigger ids, derived from its identity alone:
the pre-due reminder uses the base id and the expiry uses base id + 1.
Because the ids never depend on the due date, re-arming after an edit
addresses the same two triggers.
"""

import hashlib
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from taskmanager.models.constants import (
    REMINDER_LEAD_TIME_MINUTES,
    REMIND_BEFORE_TITLE,
    REMIND_BEFORE_BODY,
    EXPIRED_TITLE,
    EXPIRED_BODY,
)
from taskmanager.models.reminder import ReminderKind, ReminderTrigger
from taskmanager.models.task import to_utc_naive

# 30 bits, low bit cleared: base + 1 stays a positive int32 and never equals
# another task's base id.
_ID_MASK = 0x3FFFFFFE


def notification_id_for_task(task_id: str) -> int:
    """Derive the base notification id for a task.

    Uses a stable digest rather than hash(), which is salted per process.

    Args:
        task_id: Opaque task identity

    Returns:
        Even, non-negative integer below 2**30
    """
    digest = hashlib.sha256(task_id.encode("utf-8")).digest()
    return int.from_bytes(digest[:4], "big") & _ID_MASK


def notification_ids_for_task(task_id: str) -> Tuple[int, int]:
    """Return (remind_before_id, expired_id) for a task."""
    base = notification_id_for_task(task_id)
    return base, base + 1


def compute_triggers(
    task_id: str,
    title: str,
    due_date: datetime,
    now: Optional[datetime] = None,
) -> List[ReminderTrigger]:
    """Compute the triggers of a task that still lie in the future.

    Triggers at or before `now` are dropped silently; nothing is backfilled.

    Args:
        task_id: Task identity
        title: Task title (used in the notification text)
        due_date: Absolute due timestamp
        now: Scheduling moment (defaults to current UTC time)

    Returns:
        Zero, one or two triggers in firing order
    """
    if now is None:
        now = datetime.utcnow()
    now = to_utc_naive(now)
    due_date = to_utc_naive(due_date)
    remind_id, expired_id = notification_ids_for_task(task_id)

    candidates = [
        ReminderTrigger(
            notification_id=remind_id,
            kind=ReminderKind.REMIND_BEFORE,
            title=REMIND_BEFORE_TITLE,
            body=REMIND_BEFORE_BODY.format(title=title),
            fire_at=due_date - timedelta(minutes=REMINDER_LEAD_TIME_MINUTES),
        ),
        ReminderTrigger(
            notification_id=expired_id,
            kind=ReminderKind.EXPIRED,
            title=EXPIRED_TITLE,
            body=EXPIRED_BODY.format(title=title),
            fire_at=due_date,
        ),
    ]
    return [t for t in candidates if t.fire_at > now]
