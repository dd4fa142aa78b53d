"""
Service layer - business logic
"""
from .user_service import UserService
from .message_service import MessageService
from .cache_service import CacheService, cache_service
from .ingress import MessageIngress

__all__ = [
    "UserService",
    "MessageService",
    "CacheService",
    "cache_service",
    "MessageIngress"
]
