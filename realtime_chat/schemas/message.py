"""
Message Pydantic schemas
"""
from pydantic import AliasChoices, BaseModel, Field
from datetime import datetime
from typing import Any, Optional

from realtime_chat.models import MessageType


class MessageCreate(BaseModel):
    """Schema for creating message (accepts `fileUrl` or `file_url`)"""
    content: Optional[str] = None
    type: str = MessageType.TEXT.value
    file_url: Optional[str] = Field(default=None, alias="fileUrl")
    
    class Config:
        populate_by_name = True


class SenderResponse(BaseModel):
    """Public identity of a message sender"""
    id: int
    username: str
    email: str
    
    class Config:
        from_attributes = True


class MessageResponse(BaseModel):
    """
    Schema for message response and the `message` event payload

    Serialized with camelCase wire names (`fileUrl`, `createdAt`); reads
    either spelling back, so cached history round-trips.
    """
    id: int
    sender: SenderResponse
    type: MessageType
    content: str
    file_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("file_url", "fileUrl"),
        serialization_alias="fileUrl"
    )
    created_at: datetime = Field(
        validation_alias=AliasChoices("created_at", "createdAt"),
        serialization_alias="createdAt"
    )
    
    class Config:
        from_attributes = True
        populate_by_name = True


class WireEvent(BaseModel):
    """Frame exchanged over the WebSocket: {"event": ..., "data": ...}"""
    event: str
    data: Any = None
