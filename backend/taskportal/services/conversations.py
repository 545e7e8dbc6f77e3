"""
Conversation Aggregator
Per-counterparty summaries, read tracking and sending for direct messages
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from taskportal.core.exceptions import UserNotFoundError, ValidationFailure
from taskportal.models.message import Message
from taskportal.models.user import User
from taskportal.services.identity_store import IdentityStore
from taskportal.services.message_store import MessageStore, MessageFilter

ADMIN_ALIAS = "admin"


@dataclass
class ConversationSummary:
    counterparty_id: str
    last_message: Message
    unread_count: int = 0
    counterparty: Optional[User] = None


def _recency(message: Message) -> tuple:
    return (message.created_at, message.id)


def summarize_conversations(messages: List[Message], requester_id: str) -> List[ConversationSummary]:
    """
    Group ``messages`` by the identity on the other side of ``requester_id``.

    The representative message is the latest by (created_at, id); unread
    counts only messages addressed to the requester. Summaries come back
    newest first.
    """
    summaries: Dict[str, ConversationSummary] = {}
    for message in messages:
        if requester_id not in (message.sender_id, message.recipient_id):
            continue
        counterparty_id = message.counterparty_of(requester_id)
        summary = summaries.get(counterparty_id)
        if summary is None:
            summary = summaries[counterparty_id] = ConversationSummary(counterparty_id, message)
        elif _recency(message) > _recency(summary.last_message):
            summary.last_message = message
        if message.recipient_id == requester_id and not message.read:
            summary.unread_count += 1

    return sorted(summaries.values(), key=lambda s: _recency(s.last_message), reverse=True)


class ConversationAggregator:
    """Service for direct messaging between identities"""

    def __init__(self, messages: MessageStore, identities: IdentityStore):
        self.messages = messages
        self.identities = identities

    @classmethod
    def for_session(cls, db: AsyncSession) -> "ConversationAggregator":
        return cls(MessageStore(db), IdentityStore(db))

    async def summaries(self, requester_id: str) -> List[ConversationSummary]:
        messages = await self.messages.query(MessageFilter(participant_id=requester_id))
        summaries = summarize_conversations(messages, requester_id)
        users = {
            user.id: user
            for user in await self.identities.load_many(s.counterparty_id for s in summaries)
        }
        for summary in summaries:
            summary.counterparty = users.get(summary.counterparty_id)
        return summaries

    async def conversation(self, requester_id: str, counterparty_id: str) -> List[Message]:
        """Full exchange between the pair, oldest first"""
        return await self.messages.query(MessageFilter(between=(requester_id, counterparty_id)))

    async def inbox(self, requester_id: str) -> List[Message]:
        """Every message the requester sent or received, newest first"""
        return await self.messages.query(MessageFilter(participant_id=requester_id), newest_first=True)

    async def mark_read(self, counterparty_id: str, requester_id: str) -> int:
        """Mark counterparty -> requester messages read; 0 when nothing was unread"""
        return await self.messages.update_many(
            MessageFilter(sender_id=counterparty_id, recipient_id=requester_id, read=False),
            {"read": True},
        )

    async def mark_all_read(self, requester_id: str) -> int:
        return await self.messages.update_many(
            MessageFilter(recipient_id=requester_id, read=False),
            {"read": True},
        )

    async def unread_count(self, requester_id: str) -> int:
        return await self.messages.count(MessageFilter(recipient_id=requester_id, read=False))

    async def resolve_recipient(self, recipient_key: str) -> User:
        """An identity id, or ``"admin"`` for the first active admin"""
        if recipient_key == ADMIN_ALIAS:
            recipient = await self.identities.find_admin()
        else:
            recipient = await self.identities.find_by_id(recipient_key)
        if recipient is None:
            raise UserNotFoundError(recipient_key)
        return recipient

    async def send(
        self,
        sender: User,
        recipient_key: str,
        content: str,
        attachments: Optional[List[dict]] = None,
    ) -> Message:
        if not content or not content.strip():
            raise ValidationFailure("Message content is required", field="content")
        recipient = await self.resolve_recipient(recipient_key)
        if recipient.id == sender.id:
            raise ValidationFailure("Cannot send a message to yourself", field="recipient_id")

        message = Message(
            content=content.strip(),
            sender_id=sender.id,
            recipient_id=recipient.id,
            sender=sender,
            recipient=recipient,
            read=False,
            attachments=list(attachments or []),
        )
        return await self.messages.insert(message)
