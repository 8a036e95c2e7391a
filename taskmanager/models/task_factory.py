"""Task creation factory for taskmanager.

This module centralizes task creation logic so that every entry point
assigns identity and applies the same defaults.
"""

import uuid
from datetime import datetime
from typing import Optional, Union

from taskmanager.models.task import Task, TaskPriority
from taskmanager.models.constants import DEFAULT_CATEGORY, DEFAULT_PRIORITY


def create_task_base(
    user_id: str,
    title: str,
    due_date: datetime,
    description: Optional[str] = None,
    category: Optional[str] = None,
    priority: Optional[Union[TaskPriority, str]] = None,
    is_completed: Optional[bool] = None,
) -> Task:
    """Create a new task with defaults, allowing overrides.

    The task identity is assigned here, once, and never changes afterwards.

    Args:
        user_id: Owner identity (required)
        title: Task title (required)
        due_date: Absolute due timestamp (required)
        description: Task description (defaults to empty)
        category: Built-in or user-defined category (defaults to Work)
        priority: Task priority (defaults to Medium)
        is_completed: Initial completion flag (defaults to False)

    Returns:
        Task object with defaults applied
    """
    now = datetime.utcnow()
    return Task(
        id=str(uuid.uuid4()),
        user_id=user_id,
        title=title,
        description=description if description is not None else "",
        due_date=due_date,
        category=category if category is not None else DEFAULT_CATEGORY,
        priority=priority if priority is not None else DEFAULT_PRIORITY,
        is_completed=is_completed if is_completed is not None else False,
        created_at=now,
        updated_at=now,
    )
