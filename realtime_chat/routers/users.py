"""
User endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, Body
from sqlalchemy.orm import Session

from realtime_chat.database import get_db
from realtime_chat.realtime import registry
from realtime_chat.schemas.user import UserCreate, UserResponse
from realtime_chat.services import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/register", response_model=UserResponse)
def register_user(user: UserCreate = Body(...), db: Session = Depends(get_db)):
    """
        Register a new user
        Request body:
        {
            "username": "alice",
            "email": "alice@example.com"
        }
    """
    try:
        return UserService.create_user(db, user)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/online")
def get_online_users():
    """Identities announced by live connections"""
    users = registry.identities()
    
    return {
        "online_users": users,
        "count": len(users),
        "connections": registry.count()
    }


@router.get("/{username}", response_model=UserResponse)
def get_user(username: str, db: Session = Depends(get_db)):
    """Get user by username"""
    user = UserService.get_by_username(db, username)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user
