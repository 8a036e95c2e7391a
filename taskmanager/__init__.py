"""taskmanager: personal task manager with due-date reminders and Google Calendar sync."""
