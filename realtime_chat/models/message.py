"""
Chat message model
"""
import enum
from sqlalchemy import Column, Integer, String, Text, DateTime, Enum, Index, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from .base import Base


class MessageType(str, enum.Enum):
    """Kinds of chat message"""
    TEXT = "text"
    IMAGE = "image"
    VIDEO = "video"


class Message(Base):
    """Message model - immutable once created"""
    __tablename__ = "messages"
    
    id = Column(Integer, primary_key=True, index=True)
    sender_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    type = Column(
        Enum(MessageType, values_callable=lambda e: [m.value for m in e], name="message_type"),
        default=MessageType.TEXT,
        nullable=False
    )
    content = Column(Text, nullable=False, default="")
    file_url = Column(String(512), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    
    sender = relationship("User", back_populates="messages", lazy="joined")
    
    # History is read oldest first, ties by insertion order
    __table_args__ = (
        Index('idx_created_id', 'created_at', 'id'),
    )
    
    def __repr__(self):
        return f"<Message(id={self.id}, sender_id={self.sender_id}, type='{self.type.value}')>"
