"""
Message service - the durable message store
"""
import logging
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import List, Optional

from realtime_chat.exceptions import StorageError
from realtime_chat.models import Message, MessageType

logger = logging.getLogger(__name__)


class MessageService:
    """Service for message persistence"""
    
    @staticmethod
    def create_message(
        db: Session,
        sender_id: int,
        type: MessageType,
        content: str = "",
        file_url: Optional[str] = None
    ) -> Message:
        """
        Persist a new message
        
        Args:
            db: Database session
            sender_id: Sender user ID
            type: Message type
            content: Text body
            file_url: Stored media reference
            
        Returns:
            Created message with store-assigned id and created_at
            
        Raises:
            StorageError: If the write is rejected or the database is unavailable
        """
        message = Message(
            sender_id=sender_id,
            type=type,
            content=content,
            file_url=file_url
        )
        try:
            db.add(message)
            db.commit()
            db.refresh(message)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to persist message from user {sender_id}: {e}")
            raise StorageError("message could not be stored") from e
        
        return message
    
    @staticmethod
    def list_all(db: Session) -> List[Message]:
        """
        Get every message, oldest first
        
        Raises:
            StorageError: If the database is unavailable
        """
        try:
            return (
                db.query(Message)
                .order_by(Message.created_at.asc(), Message.id.asc())
                .all()
            )
        except SQLAlchemyError as e:
            logger.error(f"Failed to load message history: {e}")
            raise StorageError("message history unavailable") from e
    
    @staticmethod
    def get_message_count(db: Session) -> int:
        """Get total message count"""
        return db.query(Message).count()
