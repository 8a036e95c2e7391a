"""Local notification delivery for taskmanager."""

from taskmanager.notifications.notifier import Notifier
from taskmanager.notifications.local import LocalNotifier, log_notification

__all__ = [
    "Notifier",
    "LocalNotifier",
    "log_notification",
]
