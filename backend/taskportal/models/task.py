"""Task model: assignment, submission, grading and the embedded notification log"""
from sqlalchemy import (
    Column, String, DateTime, Enum as SQLEnum, Integer, Text, ForeignKey, JSON, Index, Table,
)
from sqlalchemy.orm import relationship
from typing import List, Optional
import enum

from taskportal.core.database import Base, new_id, utc_now


class TaskStatus(str, enum.Enum):
    """Lifecycle states: not_started -> in_progress -> submitted -> completed | rejected"""
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    SUBMITTED = "submitted"
    COMPLETED = "completed"
    REJECTED = "rejected"


class TaskPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class NotificationType(str, enum.Enum):
    """Kinds of entries in a task's notification log"""
    SUBMISSION = "submission"
    COMPLETION = "completion"
    TASK_REVIEW = "task_review"


task_assignees = Table(
    "task_assignees",
    Base.metadata,
    Column("task_id", String(36), ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Index("ix_task_assignees_user_id", "user_id"),
)


class Task(Base):
    """A task created by an admin and assigned to one or more students"""
    __tablename__ = "tasks"

    __table_args__ = (
        Index('ix_tasks_status', 'status'),
        Index('ix_tasks_created_by', 'created_by'),
        Index('ix_tasks_created_at', 'created_at'),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(100), nullable=False)
    deadline = Column(DateTime, nullable=False)
    priority = Column(SQLEnum(TaskPriority), default=TaskPriority.MEDIUM, nullable=False)
    requirements = Column(JSON, default=list, nullable=False)

    created_by = Column(String(36), ForeignKey("users.id"), nullable=False)
    status = Column(SQLEnum(TaskStatus), default=TaskStatus.NOT_STARTED, nullable=False)

    # Submission
    submission_link = Column(String(500), nullable=True)
    submitted_at = Column(DateTime, nullable=True)

    # Grading
    feedback = Column(Text, nullable=True)
    score = Column(Integer, nullable=True)  # 0-100, null = ungraded
    reviewed_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    completed_by = Column(String(36), ForeignKey("users.id"), nullable=True)

    # Append-only log of {id, type, message, timestamp, read, recipient_ids}
    notifications = Column(JSON, default=list, nullable=False)

    created_at = Column(DateTime, default=utc_now, nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)

    # Relationships (selectin: async sessions cannot lazy-load)
    assignees = relationship("User", secondary=task_assignees, lazy="selectin")
    creator = relationship("User", foreign_keys=[created_by], lazy="selectin")

    @property
    def assignee_ids(self) -> List[str]:
        return [user.id for user in self.assignees]

    def is_assignee(self, user_id: str) -> bool:
        return any(user.id == user_id for user in self.assignees)

    @property
    def completion_timestamp(self) -> Optional[object]:
        """Admin review time wins over the student's self-reported completion"""
        return self.reviewed_at or self.completed_at

    def __repr__(self):
        return f"<Task {self.title} [{self.status.value if self.status else '?'}]>"
