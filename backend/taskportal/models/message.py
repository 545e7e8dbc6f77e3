from sqlalchemy import Column, String, Boolean, DateTime, Integer, Text, ForeignKey, JSON, Index
from sqlalchemy.orm import relationship

from taskportal.core.database import Base, utc_now


class Message(Base):
    """
    Direct message between two identities.

    Integer ids are assigned in insertion order and break ties between
    messages sharing a created_at. Only ``read`` ever changes after insert.
    """
    __tablename__ = "messages"

    __table_args__ = (
        Index('ix_messages_pair_created', 'sender_id', 'recipient_id', 'created_at'),
        Index('ix_messages_recipient_read', 'recipient_id', 'read'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    content = Column(Text, nullable=False)
    sender_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    recipient_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    read = Column(Boolean, default=False, nullable=False)
    attachments = Column(JSON, default=list, nullable=False)  # [{filename, path, mimetype}]
    created_at = Column(DateTime, default=utc_now, nullable=False)

    sender = relationship("User", foreign_keys=[sender_id], lazy="selectin")
    recipient = relationship("User", foreign_keys=[recipient_id], lazy="selectin")

    def counterparty_of(self, user_id: str) -> str:
        return self.recipient_id if self.sender_id == user_id else self.sender_id

    def __repr__(self):
        return f"<Message {self.id} {self.sender_id} -> {self.recipient_id}>"
