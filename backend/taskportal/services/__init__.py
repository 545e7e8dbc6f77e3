from taskportal.services.identity_store import IdentityStore
from taskportal.services.task_store import TaskStore, TaskFilter, TaskSort
from taskportal.services.message_store import MessageStore, MessageFilter
from taskportal.services.task_lifecycle import TaskLifecycle
from taskportal.services.conversations import ConversationAggregator, ConversationSummary
from taskportal.services.presence import PresenceRegistry, NotificationDispatcher, EventType
from taskportal.services.reporting import ReportingService
from taskportal.services.blog_service import BlogService

__all__ = [
    # Stores
    "IdentityStore",
    "TaskStore",
    "TaskFilter",
    "TaskSort",
    "MessageStore",
    "MessageFilter",
    # Engines
    "TaskLifecycle",
    "ConversationAggregator",
    "ConversationSummary",
    "PresenceRegistry",
    "NotificationDispatcher",
    "EventType",
    "ReportingService",
    "BlogService",
]
