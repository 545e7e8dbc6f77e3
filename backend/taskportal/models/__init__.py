# Re-export all models for convenient imports
from taskportal.models.user import User, UserRole, StudentCategory
from taskportal.models.task import Task, TaskStatus, TaskPriority, NotificationType, task_assignees
from taskportal.models.message import Message
from taskportal.models.blog import BlogPost, BlogComment, BlogStatus

__all__ = [
    # Identity
    "User",
    "UserRole",
    "StudentCategory",
    # Tasks
    "Task",
    "TaskStatus",
    "TaskPriority",
    "NotificationType",
    "task_assignees",
    # Messaging
    "Message",
    # Blog
    "BlogPost",
    "BlogComment",
    "BlogStatus",
]
