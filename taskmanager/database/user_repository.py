"""Repository for User database operations."""

import logging
from typing import Optional, Tuple
from sqlalchemy import func
from sqlalchemy.orm import Session

from taskmanager.models.user import User, normalize_email
from taskmanager.database.models import UserDB

logger = logging.getLogger(__name__)


class UserRepository:
    """Repository for User database operations."""

    def __init__(self, db: Session):
        self.db = db

    def _by_email(self, email: str):
        # Rows written before emails were normalized may carry mixed case.
        return self.db.query(UserDB).filter(func.lower(UserDB.email) == normalize_email(email))

    def get(self, user_id: str) -> Optional[User]:
        """Get user by ID."""
        user_db = self.db.query(UserDB).filter(UserDB.id == user_id).first()
        return user_db.to_pydantic() if user_db else None

    def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email."""
        user_db = self._by_email(email).first()
        return user_db.to_pydantic() if user_db else None

    def get_with_password_hash(self, email: str) -> Optional[Tuple[User, Optional[str]]]:
        """Get user and stored password hash by email (for sign-in)."""
        user_db = self._by_email(email).first()
        if not user_db:
            return None
        return user_db.to_pydantic(), user_db.password_hash

    def create(self, user: User, password_hash: Optional[str] = None) -> User:
        """Create a new user."""
        try:
            user = user.model_copy(update={"email": normalize_email(user.email)})
            user_db = UserDB.from_pydantic(user, password_hash=password_hash)
            self.db.add(user_db)
            self.db.commit()
            self.db.refresh(user_db)
            logger.debug(f"Created user {user.id}: {user.email}")
            return user_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create user {user.id}: {type(e).__name__}: {str(e)}")
            raise

    def create_or_update(self, user: User) -> User:
        """Create or update user (upsert).

        The stored password hash, if any, is left untouched.

        Args:
            user: User object to create or update

        Returns:
            Created or updated User object
        """
        user_db = self.db.query(UserDB).filter(UserDB.id == user.id).first()

        if not user_db:
            return self.create(user)

        user_db.email = user.email
        user_db.name = user.name
        user_db.updated_at = user.updated_at
        try:
            self.db.commit()
            self.db.refresh(user_db)
            logger.debug(f"Updated user {user.id}: {user.email}")
            return user_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update user {user.id}: {type(e).__name__}: {str(e)}")
            raise
