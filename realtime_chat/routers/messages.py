"""
Chat message endpoints
"""
import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List

from realtime_chat.database import get_db
from realtime_chat.dependencies import get_current_user, get_ingress
from realtime_chat.exceptions import ValidationError, StorageError
from realtime_chat.models import User
from realtime_chat.schemas.message import MessageCreate, MessageResponse
from realtime_chat.services import MessageService, MessageIngress, cache_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/chat", tags=["messages"])


@router.get("", response_model=List[MessageResponse])
def get_messages(
    use_cache: bool = True,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Get the full message history, oldest first
    
    Args:
        use_cache: Whether to use Redis cache
    """
    generation = cache_service.history_generation() if use_cache else None
    if generation is not None:
        cached = cache_service.get_history(generation)
        if cached is not None:
            logger.debug("[CACHE HIT] message history")
            return cached
        logger.debug("[CACHE MISS] message history")
    
    try:
        messages = MessageService.list_all(db)
    except StorageError as e:
        raise HTTPException(status_code=503, detail=str(e))
    
    result = [
        MessageResponse.model_validate(m).model_dump(mode="json", by_alias=True)
        for m in messages
    ]
    
    if generation is not None:
        cache_service.set_history(result, generation)
    
    return result


@router.post("", response_model=MessageResponse)
async def send_message(
    payload: MessageCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    ingress: MessageIngress = Depends(get_ingress)
):
    """
    Send a message; it is broadcast to every live connection once stored
    
    Request body:
    {
        "content": "hi",
        "type": "text",
        "fileUrl": null
    }
    """
    try:
        return ingress.submit(
            db,
            sender=user,
            type=payload.type,
            content=payload.content,
            file_url=payload.file_url
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=503, detail=str(e))
