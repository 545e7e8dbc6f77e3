"""
Direct messaging endpoints
"""
from fastapi import APIRouter, Depends, status
from typing import List

from taskportal.api.v1.deps import get_conversations, get_dispatcher
from taskportal.models.user import User
from taskportal.modules.auth.dependencies import get_current_user
from taskportal.schemas.message import (
    SendMessage,
    MessageOut,
    ConversationSummaryResponse,
    ReadResult,
    UnreadCount,
)
from taskportal.services.conversations import ConversationAggregator
from taskportal.services.presence import NotificationDispatcher, EventType

router = APIRouter()


@router.get("", response_model=List[MessageOut])
async def list_messages(
    current_user: User = Depends(get_current_user),
    conversations: ConversationAggregator = Depends(get_conversations),
):
    """Everything the caller sent or received, newest first"""
    return await conversations.inbox(current_user.id)


@router.post("", response_model=MessageOut, status_code=status.HTTP_201_CREATED)
async def send_message(
    data: SendMessage,
    current_user: User = Depends(get_current_user),
    conversations: ConversationAggregator = Depends(get_conversations),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    message = await conversations.send(
        current_user,
        data.recipient_id,
        data.content,
        [attachment.model_dump() for attachment in data.attachments],
    )
    await dispatcher.dispatch(
        message.recipient_id,
        EventType.NEW_MESSAGE,
        {
            "message": MessageOut.model_validate(message),
            "sender": {"id": current_user.id, "name": current_user.name},
        },
    )
    return message


@router.get("/unread", response_model=UnreadCount)
async def unread_count(
    current_user: User = Depends(get_current_user),
    conversations: ConversationAggregator = Depends(get_conversations),
):
    return {"unread": await conversations.unread_count(current_user.id)}


@router.post("/read", response_model=ReadResult)
async def mark_all_read(
    current_user: User = Depends(get_current_user),
    conversations: ConversationAggregator = Depends(get_conversations),
):
    return {"updated": await conversations.mark_all_read(current_user.id)}


@router.post("/read/{counterparty_id}", response_model=ReadResult)
async def mark_conversation_read(
    counterparty_id: str,
    current_user: User = Depends(get_current_user),
    conversations: ConversationAggregator = Depends(get_conversations),
):
    """Idempotent: a repeat call reports 0 updated"""
    return {"updated": await conversations.mark_read(counterparty_id, current_user.id)}


@router.get("/conversations", response_model=List[ConversationSummaryResponse])
async def list_conversations(
    current_user: User = Depends(get_current_user),
    conversations: ConversationAggregator = Depends(get_conversations),
):
    """Latest message and unread count per counterparty, newest first"""
    summaries = await conversations.summaries(current_user.id)
    return [ConversationSummaryResponse.model_validate(summary) for summary in summaries]


@router.get("/conversations/{user_id}", response_model=List[MessageOut])
async def get_conversation(
    user_id: str,
    current_user: User = Depends(get_current_user),
    conversations: ConversationAggregator = Depends(get_conversations),
):
    return await conversations.conversation(current_user.id, user_id)
