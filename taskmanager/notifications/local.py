"""APScheduler-backed local notifier.

Each notification is one date-triggered job keyed by its notification id, so
scheduling the same id again replaces the earlier trigger.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.date import DateTrigger

from taskmanager.models.reminder import ScheduledNotification

logger = logging.getLogger(__name__)

DeliverFn = Callable[[int, str, str], None]


def log_notification(notification_id: int, title: str, body: str) -> None:
    """Default delivery: write the notification to the log."""
    logger.info(f"Notification {notification_id}: {title} - {body}")


def _job_id(notification_id: int) -> str:
    return str(notification_id)


class LocalNotifier:
    """Delivers notifications from an in-process background scheduler.

    Implements the Notifier protocol. Trigger times are naive UTC.
    """

    def __init__(
        self,
        scheduler: Optional[BackgroundScheduler] = None,
        deliver: Optional[DeliverFn] = None,
    ):
        self.scheduler = scheduler or BackgroundScheduler(timezone="UTC")
        self.deliver = deliver or log_notification

    def start(self, paused: bool = False) -> None:
        """Start the scheduler thread (no-op if already running)."""
        if not self.scheduler.running:
            self.scheduler.start(paused=paused)

    def shutdown(self) -> None:
        """Stop the scheduler thread without waiting for running jobs."""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)

    def schedule(self, notification_id: int, title: str, body: str, fire_at: datetime) -> None:
        self.scheduler.add_job(
            self.deliver,
            DateTrigger(run_date=fire_at, timezone="UTC"),
            args=[notification_id, title, body],
            id=_job_id(notification_id),
            name=title,
            replace_existing=True,
            misfire_grace_time=None,
        )
        logger.debug(f"Scheduled notification {notification_id} at {fire_at.isoformat()}")

    def cancel(self, notification_id: int) -> None:
        try:
            self.scheduler.remove_job(_job_id(notification_id))
            logger.debug(f"Cancelled notification {notification_id}")
        except JobLookupError:
            # Already fired, already cancelled, or never scheduled.
            pass

    def cancel_all(self) -> None:
        self.scheduler.remove_all_jobs()
        logger.debug("Cancelled all notifications")

    def pending(self) -> List[ScheduledNotification]:
        notifications: List[ScheduledNotification] = []
        for job in self.scheduler.get_jobs():
            notification_id, title, body = job.args
            run_date = job.trigger.run_date
            notifications.append(
                ScheduledNotification(
                    notification_id=notification_id,
                    title=title,
                    body=body,
                    fire_at=run_date.replace(tzinfo=None),
                )
            )
        return sorted(notifications, key=lambda n: n.notification_id)
