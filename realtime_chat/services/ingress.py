"""
Message ingress - validate, persist, then broadcast a submitted message
"""
import logging
from sqlalchemy.orm import Session
from typing import Optional

from realtime_chat.exceptions import ValidationError
from realtime_chat.models import User, MessageType
from realtime_chat.realtime.channel import BroadcastChannel
from realtime_chat.schemas.message import MessageResponse
from realtime_chat.services.cache_service import CacheService
from realtime_chat.services.message_service import MessageService

logger = logging.getLogger(__name__)

MEDIA_TYPES = (MessageType.IMAGE, MessageType.VIDEO)


class MessageIngress:
    """
    Entry point for new messages.

    received → validated → persisted → broadcast. A message that fails to
    persist is never broadcast; a persisted message is a success whether or
    not anyone receives the broadcast.
    """

    def __init__(self, channel: BroadcastChannel, cache: Optional[CacheService] = None):
        self.channel = channel
        self.cache = cache

    @staticmethod
    def validate(type: Optional[str], content: Optional[str], file_url: Optional[str]) -> MessageType:
        """
        Check a submission against its type

        Returns:
            The parsed message type

        Raises:
            ValidationError: If the type is unknown or its required field is missing
        """
        try:
            message_type = MessageType(type or MessageType.TEXT.value)
        except ValueError:
            raise ValidationError(f"Unknown message type '{type}'")

        if message_type == MessageType.TEXT and not (content or "").strip():
            raise ValidationError("Text messages require non-empty content")

        if message_type in MEDIA_TYPES and not file_url:
            raise ValidationError(f"{message_type.value.capitalize()} messages require a file URL")

        return message_type

    def submit(
        self,
        db: Session,
        sender: User,
        type: Optional[str],
        content: Optional[str] = None,
        file_url: Optional[str] = None
    ) -> MessageResponse:
        """
        Accept a new message

        Args:
            db: Database session
            sender: Resolved sender identity
            type: "text", "image" or "video" (defaults to text)
            content: Text body, required for text
            file_url: Media reference, required for image/video

        Returns:
            The stored message

        Raises:
            ValidationError: If the submission is malformed
            StorageError: If persistence failed (nothing is broadcast)
        """
        message_type = self.validate(type, content, file_url)

        message = MessageService.create_message(
            db,
            sender_id=sender.id,
            type=message_type,
            content=content or "",
            file_url=file_url if message_type in MEDIA_TYPES else None
        )
        stored = MessageResponse.model_validate(message)

        logger.info(
            f"💬 {sender.username} stored {message_type.value} message {stored.id}",
            extra={'message_id': stored.id, 'identity': sender.username}
        )

        if self.cache is not None:
            self.cache.invalidate_history()

        self.channel.publish(stored.model_dump(mode="json", by_alias=True))

        return stored
