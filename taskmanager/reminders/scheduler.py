"""Reminder scheduling for taskmanager.

Arms and cancels a task's reminder triggers through a Notifier. Scheduling
is best effort: notifier failures are logged and never reach the caller,
and nothing is retried.
"""

import logging
import threading
from datetime import datetime
from typing import List, Optional

from taskmanager.models.reminder import ReminderTrigger
from taskmanager.notifications.local import LocalNotifier
from taskmanager.notifications.notifier import Notifier
from taskmanager.reminders.triggers import compute_triggers, notification_ids_for_task

logger = logging.getLogger(__name__)


class ReminderScheduler:
    """Schedules the two reminder triggers of each task."""

    def __init__(self, notifier: Notifier):
        self.notifier = notifier

    def _arm(self, trigger: ReminderTrigger) -> bool:
        try:
            self.notifier.schedule(
                trigger.notification_id,
                trigger.title,
                trigger.body,
                trigger.fire_at,
            )
            return True
        except Exception as e:
            logger.warning(
                f"Failed to schedule notification {trigger.notification_id}: {type(e).__name__}: {str(e)}"
            )
            return False

    def _disarm(self, notification_id: int) -> None:
        try:
            self.notifier.cancel(notification_id)
        except Exception as e:
            logger.warning(f"Failed to cancel notification {notification_id}: {type(e).__name__}: {str(e)}")

    def schedule(
        self,
        task_id: str,
        title: str,
        due_date: datetime,
        now: Optional[datetime] = None,
    ) -> List[ReminderTrigger]:
        """Request delivery of every future trigger of a task.

        Returns:
            The triggers that were handed to the notifier successfully
        """
        armed = [t for t in compute_triggers(task_id, title, due_date, now) if self._arm(t)]
        logger.debug(f"Armed {len(armed)} reminder(s) for task {task_id}")
        return armed

    def reschedule(
        self,
        task_id: str,
        title: str,
        due_date: datetime,
        now: Optional[datetime] = None,
    ) -> List[ReminderTrigger]:
        """Re-arm a task's triggers after an edit.

        Both triggers are re-issued under the same ids; whichever id is not
        re-armed (its time has passed) is cancelled so no stale reminder
        from the previous due date survives.
        """
        triggers = compute_triggers(task_id, title, due_date, now)
        armed = [t for t in triggers if self._arm(t)]
        kept = {t.notification_id for t in triggers}
        for notification_id in notification_ids_for_task(task_id):
            if notification_id not in kept:
                self._disarm(notification_id)
        return armed

    def cancel(self, task_id: str) -> None:
        """Cancel both trigger ids of a task. Safe to call repeatedly."""
        for notification_id in notification_ids_for_task(task_id):
            self._disarm(notification_id)
        logger.debug(f"Cancelled reminders for task {task_id}")

    def pending_for_task(self, task_id: str) -> List[ReminderTrigger]:
        """List the task's triggers that are still waiting to fire."""
        remind_id, expired_id = notification_ids_for_task(task_id)
        kinds = {remind_id: "remind_before", expired_id: "expired"}
        return [
            ReminderTrigger(kind=kinds[n.notification_id], **n.model_dump())
            for n in self.notifier.pending()
            if n.notification_id in kinds
        ]


# Process-wide scheduler (lazily started)
_default_scheduler: Optional[ReminderScheduler] = None
_default_lock = threading.Lock()


def get_reminder_scheduler() -> ReminderScheduler:
    """Get the process-wide reminder scheduler (dependency for FastAPI)."""
    global _default_scheduler
    with _default_lock:
        if _default_scheduler is None:
            notifier = LocalNotifier()
            notifier.start()
            _default_scheduler = ReminderScheduler(notifier)
        return _default_scheduler


def shutdown_reminder_scheduler() -> None:
    """Stop the process-wide scheduler if it was started."""
    global _default_scheduler
    with _default_lock:
        if _default_scheduler is not None and isinstance(_default_scheduler.notifier, LocalNotifier):
            _default_scheduler.notifier.shutdown()
        _default_scheduler = None
