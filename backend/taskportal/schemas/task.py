"""
Task Schemas - typed admin commands, lifecycle requests and responses
"""

from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List
from datetime import datetime

from taskportal.models.task import TaskStatus, TaskPriority, NotificationType
from taskportal.schemas.common import UserSummary, to_naive_utc


def _dedupe(ids: List[str]) -> List[str]:
    seen = set()
    unique = []
    for value in ids:
        value = value.strip()
        if value and value not in seen:
            seen.add(value)
            unique.append(value)
    if not unique:
        raise ValueError("At least one assignee is required")
    return unique


# ============== Admin Commands ==============

class CreateTask(BaseModel):
    """Create a task and assign it to one or more students"""
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1, max_length=100)
    deadline: datetime
    priority: TaskPriority = TaskPriority.MEDIUM
    requirements: List[str] = Field(default_factory=list)
    assigned_to: List[str] = Field(..., min_length=1, description="Student ids")

    model_config = {"extra": "forbid"}

    @field_validator('deadline')
    @classmethod
    def normalize_deadline(cls, v):
        return to_naive_utc(v)

    @field_validator('assigned_to')
    @classmethod
    def unique_assignees(cls, v):
        return _dedupe(v)


class UpdateTaskDetails(BaseModel):
    """Edit descriptive fields; deadline and assignees have their own commands"""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    priority: Optional[TaskPriority] = None
    requirements: Optional[List[str]] = None

    model_config = {"extra": "forbid"}

    @model_validator(mode='after')
    def require_a_change(self):
        if not self.model_fields_set:
            raise ValueError("No fields to update")
        for name in self.model_fields_set:
            if getattr(self, name) is None:
                raise ValueError(f"'{name}' cannot be null")
        return self


class RescheduleTask(BaseModel):
    deadline: datetime

    model_config = {"extra": "forbid"}

    @field_validator('deadline')
    @classmethod
    def normalize_deadline(cls, v):
        return to_naive_utc(v)


class ReassignTask(BaseModel):
    """Replace the whole assignee set"""
    assigned_to: List[str] = Field(..., min_length=1)

    model_config = {"extra": "forbid"}

    @field_validator('assigned_to')
    @classmethod
    def unique_assignees(cls, v):
        return _dedupe(v)


# ============== Lifecycle Requests ==============

class SubmitTask(BaseModel):
    submission_link: str = Field(..., min_length=1, max_length=500)

    @field_validator('submission_link')
    @classmethod
    def strip_link(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Submission link is required")
        return v


class ReviewTask(BaseModel):
    """Grade a submission. Score bounds are enforced by the lifecycle engine."""
    status: TaskStatus
    feedback: Optional[str] = None
    score: Optional[int] = None


# ============== Responses ==============

class NotificationEntry(BaseModel):
    id: str
    type: NotificationType
    message: str
    timestamp: datetime
    read: bool = False
    recipient_ids: List[str] = Field(default_factory=list)


class TaskResponse(BaseModel):
    id: str
    title: str
    description: str
    category: str
    deadline: datetime
    priority: TaskPriority
    requirements: List[str] = Field(default_factory=list)
    status: TaskStatus
    created_by: str
    creator: Optional[UserSummary] = None
    assignees: List[UserSummary] = Field(default_factory=list)

    submission_link: Optional[str] = None
    submitted_at: Optional[datetime] = None
    feedback: Optional[str] = None
    score: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    completed_by: Optional[str] = None

    notifications: List[NotificationEntry] = Field(default_factory=list)
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TaskNotification(NotificationEntry):
    """An unread log entry together with the task it belongs to"""
    task_id: str
    task_title: str


class TaskStatsResponse(BaseModel):
    total: int
    by_status: dict
    by_priority: dict
    overdue: int
    upcoming: int
