"""
FastAPI Dependencies
"""
from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session
from typing import Optional

from realtime_chat.database import get_db
from realtime_chat.models import User
from realtime_chat.realtime import channel
from realtime_chat.services import UserService, MessageIngress, cache_service

# Shared ingress wired to the process-wide channel and cache
ingress = MessageIngress(channel, cache=cache_service)


def get_current_user(
    x_username: Optional[str] = Header(default=None),
    db: Session = Depends(get_db)
) -> User:
    """Resolve the caller from the identity header set by the auth layer"""
    if not x_username:
        raise HTTPException(status_code=401, detail="Missing X-Username header")

    user = UserService.get_by_username(db, x_username)
    if not user:
        raise HTTPException(status_code=401, detail=f"Unknown user '{x_username}'")

    return user


def get_ingress() -> MessageIngress:
    """Get message ingress"""
    return ingress
