"""
User service - business logic for user operations
"""
from sqlalchemy.orm import Session
from typing import Optional

from realtime_chat.models import User
from realtime_chat.schemas.user import UserCreate


class UserService:
    """Service for user operations"""
    
    @staticmethod
    def create_user(db: Session, user_data: UserCreate) -> User:
        """
        Create a new user
        
        Args:
            db: Database session
            user_data: User creation data
            
        Returns:
            Created user
            
        Raises:
            ValueError: If username or email already exists
        """
        if UserService.get_by_username(db, user_data.username):
            raise ValueError("Username already exists")
        
        if UserService.get_by_email(db, user_data.email):
            raise ValueError("Email already exists")
        
        user = User(
            username=user_data.username,
            email=user_data.email
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        
        return user
    
    @staticmethod
    def get_by_username(db: Session, username: str) -> Optional[User]:
        """Get user by username"""
        return db.query(User).filter(User.username == username).first()
    
    @staticmethod
    def get_by_email(db: Session, email: str) -> Optional[User]:
        """Get user by email"""
        return db.query(User).filter(User.email == email).first()
