"""
Message Schemas
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from taskportal.schemas.common import UserSummary


class Attachment(BaseModel):
    filename: str
    path: str
    mimetype: Optional[str] = None


class SendMessage(BaseModel):
    recipient_id: str = Field(..., min_length=1, description='Identity id, or "admin"')
    content: str = Field(..., max_length=5000)
    attachments: List[Attachment] = Field(default_factory=list)


class MessageOut(BaseModel):
    id: int
    content: str
    sender_id: str
    recipient_id: str
    read: bool
    attachments: List[Attachment] = Field(default_factory=list)
    created_at: datetime

    class Config:
        from_attributes = True


class ConversationSummaryResponse(BaseModel):
    counterparty_id: str
    counterparty: Optional[UserSummary] = None
    last_message: MessageOut
    unread_count: int

    class Config:
        from_attributes = True


class ReadResult(BaseModel):
    updated: int


class UnreadCount(BaseModel):
    unread: int
