"""
Pydantic schemas
"""
from .message import MessageCreate, MessageResponse, SenderResponse, WireEvent
from .user import UserCreate, UserResponse

__all__ = [
    "MessageCreate",
    "MessageResponse",
    "SenderResponse",
    "WireEvent",
    "UserCreate",
    "UserResponse"
]
