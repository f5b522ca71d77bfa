"""
User repository.

Handles database operations for User model.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import update
from sqlmodel import Session, select

from faaxis.models.user import User


class UserRepository:
    """Repository for User database operations."""

    def __init__(self, session: Session):
        """
        Initialize repository with database session.

        Args:
            session: SQLModel database session
        """
        self.session = session

    def create(self, user: User) -> User:
        """
        Create a new user in the database.

        Args:
            user: User instance to create

        Returns:
            Created user with generated id
        """
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user

    def get_by_id(self, user_id: int) -> Optional[User]:
        """
        Get user by ID.

        Args:
            user_id: User ID

        Returns:
            User instance if found, None otherwise
        """
        return self.session.get(User, user_id)

    def get_by_username(self, username: str) -> Optional[User]:
        """
        Get user by username (email address).

        Args:
            username: Normalised username

        Returns:
            User instance if found, None otherwise
        """
        statement = select(User).where(User.username == username)
        return self.session.exec(statement).first()

    def get_by_verification_token(self, token: str) -> Optional[User]:
        statement = select(User).where(User.verification_token == token)
        return self.session.exec(statement).first()

    def update(self, user: User) -> User:
        """
        Update an existing user.

        Args:
            user: User instance with updated data

        Returns:
            Updated user
        """
        user.updated_at = datetime.utcnow()
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user

    def exists_by_username(self, username: str) -> bool:
        """
        Check if a user with the given username exists.

        Args:
            username: Username to check

        Returns:
            True if user exists, False otherwise
        """
        return self.get_by_username(username) is not None

    def consume_reset_token(self, token: str, new_hashed_password: str, now: datetime) -> Optional[int]:
        """
        Set a new password if *token* is a live reset token, clearing it.

        The check and the invalidation run as one conditional UPDATE, so
        only one of several concurrent callers presenting the same token
        can succeed.

        Returns:
            The user id whose password changed, or None
        """
        statement = select(User.id).where(User.reset_password_token == token)
        user_id = self.session.exec(statement).first()
        if user_id is None:
            return None

        result = self.session.exec(
            update(User)
            .where(User.id == user_id, User.reset_password_token == token, User.reset_password_expires > now)
            .values(hashed_password=new_hashed_password, reset_password_token=None, reset_password_expires=None,
                    updated_at=now)
        )
        self.session.commit()
        return user_id if result.rowcount == 1 else None
