"""
Database models
"""
from .base import Base
from .user import User
from .message import Message, MessageType

__all__ = ["Base", "User", "Message", "MessageType"]
