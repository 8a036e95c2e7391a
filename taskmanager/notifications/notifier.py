"""Notifier interface."""

from datetime import datetime
from typing import List, Protocol

from taskmanager.models.reminder import ScheduledNotification


class Notifier(Protocol):
    """Interface for delivering local notifications at a point in time."""

    def schedule(self, notification_id: int, title: str, body: str, fire_at: datetime) -> None:
        """Schedule a notification. Replaces any pending one with the same id."""
        ...

    def cancel(self, notification_id: int) -> None:
        """Cancel a pending notification. Unknown ids are a no-op."""
        ...

    def cancel_all(self) -> None:
        """Cancel every pending notification."""
        ...

    def pending(self) -> List[ScheduledNotification]:
        """List notifications that have not fired yet."""
        ...
