from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, ForeignKey, JSON
from .base import Base, TimestampMixin, enum_column
from daycare.schemas.enums import MessageType, Priority


class Message(TimestampMixin, Base):
    __tablename__ = "messages"

    sender_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    recipient_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    child_id = Column(Integer, ForeignKey("children.id", ondelete="SET NULL"), nullable=True, index=True)

    subject = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    message_type = Column(enum_column(MessageType), default=MessageType.GENERAL, nullable=False, index=True)
    priority = Column(enum_column(Priority), default=Priority.MEDIUM, nullable=False, index=True)

    is_read = Column(Boolean, default=False, nullable=False, index=True)
    read_at = Column(DateTime(timezone=True), nullable=True)

    attachments = Column(JSON, default=list, nullable=False)

    # Reply threading; a message without a parent is a thread root
    parent_message_id = Column(Integer, ForeignKey("messages.id", ondelete="SET NULL"), nullable=True, index=True)

    def __repr__(self):
        return f"<Message(id={self.id}, sender={self.sender_id}, recipient={self.recipient_id})>"
