"""Request/response models for task endpoints."""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from taskmanager.models.constants import DEFAULT_CATEGORIES, DEFAULT_CATEGORY, DEFAULT_PRIORITY
from taskmanager.models.reminder import ReminderTrigger
from taskmanager.models.task import Task, TaskPriority


class TaskCreateRequest(BaseModel):
    """Request model for creating a task."""
    title: str = Field(..., min_length=1, description="Task title")
    description: str = Field("", description="Task description")
    due_date: datetime = Field(..., description="Due timestamp (naive values are UTC)")
    category: str = Field(
        DEFAULT_CATEGORY,
        min_length=1,
        description=f"One of {', '.join(DEFAULT_CATEGORIES)}, or a user-defined category",
    )
    priority: TaskPriority = Field(DEFAULT_PRIORITY, description="Task priority")


class TaskUpdateRequest(BaseModel):
    """Request model for a partial task update. Omitted fields are unchanged."""
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    category: Optional[str] = Field(None, min_length=1)
    priority: Optional[TaskPriority] = None
    is_completed: Optional[bool] = None


class TaskResponse(BaseModel):
    """Single task response."""
    task: Task


class TaskListResponse(BaseModel):
    """Task list response."""
    tasks: List[Task]
    count: int


class ReminderListResponse(BaseModel):
    """Pending reminder triggers of a task."""
    task_id: str
    reminders: List[ReminderTrigger]


class TaskStatsResponse(BaseModel):
    """Completion statistics."""
    total: int
    completed: int
    pending: int
    completion_percentage: int


class ProfileResponse(BaseModel):
    """Current user profile with task statistics."""
    email: str
    name: Optional[str] = None
    stats: TaskStatsResponse
