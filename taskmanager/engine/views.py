"""Task list views for taskmanager.

Sorting, filtering and summary statistics applied by consumers after the
owner's tasks have been retrieved. Pure functions, no I/O.
"""

from dataclasses import dataclass
from typing import List

from taskmanager.models.constants import FILTER_ALL
from taskmanager.models.task import Task


@dataclass
class TaskStats:
    """Completion statistics for a set of tasks."""

    total: int
    completed: int
    pending: int
    completion_percentage: int


def sort_by_due_date(tasks: List[Task]) -> List[Task]:
    """Sort tasks by due date, earliest first (stable)."""
    return sorted(tasks, key=lambda t: t.due_date)


def filter_tasks(
    tasks: List[Task],
    priority: str = FILTER_ALL,
    category: str = FILTER_ALL,
) -> List[Task]:
    """Keep tasks matching the given priority and category.

    Order is preserved. "All" disables the corresponding filter, so
    filtering by "All"/"All" returns the input unchanged.
    """
    result = tasks
    if priority != FILTER_ALL:
        result = [t for t in result if t.priority == priority]
    if category != FILTER_ALL:
        result = [t for t in result if t.category == category]
    return list(result)


def summarize_tasks(tasks: List[Task]) -> TaskStats:
    """Count completed and pending tasks.

    The completion percentage is truncated to a whole number and is 0 for
    an empty list.
    """
    total = len(tasks)
    completed = sum(1 for t in tasks if t.is_completed)
    percentage = (completed * 100) // total if total else 0
    return TaskStats(
        total=total,
        completed=completed,
        pending=total - completed,
        completion_percentage=percentage,
    )
