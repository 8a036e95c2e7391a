"""Task list views for taskmanager."""

from taskmanager.engine.views import TaskStats, sort_by_due_date, filter_tasks, summarize_tasks

__all__ = [
    "TaskStats",
    "sort_by_due_date",
    "filter_tasks",
    "summarize_tasks",
]
