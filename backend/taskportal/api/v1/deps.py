"""Shared endpoint dependencies"""
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from taskportal.core.database import get_db
from taskportal.services.conversations import ConversationAggregator
from taskportal.services.presence import NotificationDispatcher, PresenceRegistry
from taskportal.services.task_lifecycle import TaskLifecycle


def get_presence(request: Request) -> PresenceRegistry:
    return request.app.state.presence


def get_dispatcher(presence: PresenceRegistry = Depends(get_presence)) -> NotificationDispatcher:
    return NotificationDispatcher(presence)


def get_lifecycle(db: AsyncSession = Depends(get_db)) -> TaskLifecycle:
    return TaskLifecycle.for_session(db)


def get_conversations(db: AsyncSession = Depends(get_db)) -> ConversationAggregator:
    return ConversationAggregator.for_session(db)
