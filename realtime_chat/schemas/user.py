"""
User Pydantic schemas
"""
from pydantic import BaseModel
from datetime import datetime


class UserCreate(BaseModel):
    """Schema for creating user"""
    username: str
    email: str


class UserResponse(UserCreate):
    """Schema for user response"""
    id: int
    created_at: datetime
    
    class Config:
        from_attributes = True
