"""Constants for taskmanager.

This module centralizes all magic numbers and default values used throughout the application.
"""

from taskmanager.models.task import TaskCategory, TaskPriority


# Task defaults
DEFAULT_PRIORITY = TaskPriority.MEDIUM
DEFAULT_CATEGORY = TaskCategory.WORK.value
DEFAULT_CATEGORIES = [c.value for c in TaskCategory]

# List filters ("All" disables a filter)
FILTER_ALL = "All"

# Reminders
REMINDER_LEAD_TIME_MINUTES = 60
REMIND_BEFORE_TITLE = "Upcoming Task"
REMIND_BEFORE_BODY = "{title} is due in 1 hour!"
EXPIRED_TITLE = "Task Expired"
EXPIRED_BODY = "{title} has expired."

# Calendar sync
CALENDAR_EVENT_DURATION_MINUTES = 60
DEFAULT_CALENDAR_TIMEZONE = "Asia/Kolkata"

# Account rules
MIN_PASSWORD_LENGTH = 6
