"""
User service.

Business logic for user registration and credential checks.
"""

import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session

from faaxis.core.config import settings
from faaxis.core.errors import GENERIC_LOGIN_FAILURE, AuthenticationError, ConflictError, ServerError
from faaxis.core.logging_config import AUTH_LOGGER_NAME, mask_email
from faaxis.core.security import get_password_hash, needs_rehash, verify_password
from faaxis.db.repositories.user import UserRepository
from faaxis.models.user import User
from faaxis.schemas.user import UserCreate
from faaxis.services.email_service import EmailDeliveryError, EmailSender

logger = logging.getLogger(__name__)
audit = logging.getLogger(AUTH_LOGGER_NAME)


def normalize_username(username: str) -> str:
    """Usernames are email addresses; compare them case-insensitively."""
    return username.strip().lower()


class UserService:
    """Service for user-related business logic."""

    def __init__(self, session: Session, email_sender: Optional[EmailSender] = None):
        """
        Initialize service with database session.

        Args:
            session: SQLModel database session
            email_sender: Used to send the verification email after registration
        """
        self.session = session
        self.repository = UserRepository(session)
        self.email_sender = email_sender

    def register(self, user_data: UserCreate) -> User:
        """
        Register a new user.

        Args:
            user_data: User registration data

        Returns:
            Created user

        Raises:
            ConflictError: If the username is already registered
            ServerError: If the user could not be stored
        """
        username = normalize_username(user_data.username)
        if self.repository.exists_by_username(username):
            logger.info("Registration rejected: %s already exists", mask_email(username))
            raise ConflictError()

        user = User(username=username, hashed_password=get_password_hash(user_data.password),
                    first_name=user_data.first_name, last_name=user_data.last_name, phone=user_data.phone,
                    verification_token=secrets.token_hex(32),
                    verification_token_expires=datetime.utcnow() + timedelta(
                        hours=settings.EMAIL_VERIFICATION_EXPIRE_HOURS), )

        try:
            user = self.repository.create(user)
        except IntegrityError as exc:
            # Lost a race with a concurrent registration of the same username
            self.session.rollback()
            raise ConflictError() from exc
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Failed to create user %s: %s", mask_email(username), exc)
            raise ServerError("Server error during registration") from exc

        audit.info("User registered: id=%s", user.id)
        self._send_verification(user)
        return user

    def authenticate(self, username: str, password: str) -> User:
        """
        Check credentials and return the matching user.

        Legacy password hashes are upgraded to bcrypt on success.

        Raises:
            AuthenticationError: With a generic message, whichever check failed
        """
        user = self.repository.get_by_username(normalize_username(username))
        if not user or not verify_password(password, user.hashed_password):
            audit.info("Login failed for %s", mask_email(username))
            raise AuthenticationError(GENERIC_LOGIN_FAILURE)

        if needs_rehash(user.hashed_password):
            self._upgrade_hash(user, password)
        return user

    def get_user_by_username(self, username: str) -> Optional[User]:
        """
        Get user by username.

        Args:
            username: User email

        Returns:
            User if found, None otherwise
        """
        return self.repository.get_by_username(normalize_username(username))

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        """
        Get user by ID.

        Args:
            user_id: User ID

        Returns:
            User if found, None otherwise
        """
        return self.repository.get_by_id(user_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _upgrade_hash(self, user: User, password: str) -> None:
        try:
            user.hashed_password = get_password_hash(password)
            self.repository.update(user)
            logger.info("Upgraded legacy password hash for user id=%s", user.id)
        except (ServerError, SQLAlchemyError) as exc:
            # Login still succeeds; the legacy hash is retried next time
            self.session.rollback()
            logger.warning("Could not upgrade password hash for user id=%s: %s", user.id, exc)

    def _send_verification(self, user: User) -> None:
        if self.email_sender is None:
            return
        try:
            self.email_sender.send_verification_email(user.username, user.verification_token)
        except EmailDeliveryError as exc:
            # Registration still succeeds; the user can request a new email
            logger.error("Failed to send verification email to %s: %s", mask_email(user.username), exc)
