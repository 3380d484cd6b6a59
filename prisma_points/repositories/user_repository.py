"""
User repository - Data access layer for User model.
"""
from typing import List, Optional
from sqlalchemy.orm import Session

from prisma_points.models import User


class UserRepository:
    """Repository for User data access"""

    @staticmethod
    def get_by_id(db: Session, user_id: int) -> Optional[User]:
        """Get user by ID"""
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def get_for_update(db: Session, user_id: int) -> Optional[User]:
        """Get user by ID, locking the row for a balance change"""
        return db.query(User).filter(User.id == user_id).with_for_update().first()

    @staticmethod
    def get_by_username(db: Session, username: str) -> Optional[User]:
        """Get user by username"""
        return db.query(User).filter(User.username == username).first()

    @staticmethod
    def get_all(db: Session, role: Optional[str] = None) -> List[User]:
        """Get all users, optionally filtered by role"""
        query = db.query(User)
        if role:
            query = query.filter(User.role == role)
        return query.order_by(User.name).all()

    @staticmethod
    def create(db: Session, user: User) -> User:
        """Create new user"""
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def update(db: Session, user: User) -> User:
        """Update existing user"""
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def delete(db: Session, user: User) -> None:
        """Delete a user"""
        db.delete(user)
        db.commit()
