"""
Message Store
Direct messages between two identities. Rows are immutable except for ``read``.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from sqlalchemy import select, update, func, or_, and_

from taskportal.models.message import Message
from taskportal.services.base_store import BaseStore


@dataclass
class MessageFilter:
    """
    Conjunction of the set fields.

    ``participant_id`` matches either side of a message; ``between`` matches
    both directions of one pair.
    """
    participant_id: Optional[str] = None
    sender_id: Optional[str] = None
    recipient_id: Optional[str] = None
    read: Optional[bool] = None
    between: Optional[tuple] = None

    def clauses(self) -> list:
        conditions = []
        if self.participant_id:
            conditions.append(or_(
                Message.sender_id == self.participant_id,
                Message.recipient_id == self.participant_id,
            ))
        if self.sender_id:
            conditions.append(Message.sender_id == self.sender_id)
        if self.recipient_id:
            conditions.append(Message.recipient_id == self.recipient_id)
        if self.read is not None:
            conditions.append(Message.read == self.read)
        if self.between:
            first, second = self.between
            conditions.append(or_(
                and_(Message.sender_id == first, Message.recipient_id == second),
                and_(Message.sender_id == second, Message.recipient_id == first),
            ))
        return conditions


class MessageStore(BaseStore):
    """Service for message rows"""

    async def insert(self, message: Message) -> Message:
        self.db.add(message)
        await self._commit("insert_message")
        return message

    async def query(
        self,
        message_filter: MessageFilter,
        limit: Optional[int] = None,
        newest_first: bool = False,
    ) -> List[Message]:
        """Oldest first unless ``newest_first``; ids break ties between equal timestamps"""
        if newest_first:
            ordering = (Message.created_at.desc(), Message.id.desc())
        else:
            ordering = (Message.created_at.asc(), Message.id.asc())
        statement = select(Message).where(*message_filter.clauses()).order_by(*ordering)
        if limit is not None:
            statement = statement.limit(limit)
        result = await self._execute(statement, "query_messages")
        return list(result.scalars().all())

    async def count(self, message_filter: MessageFilter) -> int:
        result = await self._execute(
            select(func.count(Message.id)).where(*message_filter.clauses()), "count_messages"
        )
        return result.scalar() or 0

    async def update_many(self, message_filter: MessageFilter, patch: Dict[str, Any]) -> int:
        """Apply ``patch`` to every matching row; returns the number of rows changed"""
        result = await self._execute(
            update(Message)
            .where(*message_filter.clauses())
            .values(**patch)
            .execution_options(synchronize_session="evaluate"),
            "update_messages",
        )
        await self._commit("update_messages")
        return result.rowcount or 0
