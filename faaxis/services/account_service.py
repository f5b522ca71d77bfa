"""
Account recovery service.

Email verification and self-service password reset for regular users.
"""

import logging
import secrets
from datetime import datetime, timedelta

from sqlmodel import Session

from faaxis.core.config import settings
from faaxis.core.errors import AuthenticationError, ValidationError
from faaxis.core.logging_config import AUTH_LOGGER_NAME, mask_email
from faaxis.core.security import get_password_hash
from faaxis.db.repositories.user import UserRepository
from faaxis.models.user import User
from faaxis.services.email_service import EmailDeliveryError, EmailSender
from faaxis.services.session_service import SessionAuthenticator
from faaxis.services.user_service import normalize_username

logger = logging.getLogger(__name__)
audit = logging.getLogger(AUTH_LOGGER_NAME)

RESET_REQUESTED_MESSAGE = "If your account exists, a password reset email has been sent"


class AccountService:
    """Service for verification and password-reset tokens."""

    def __init__(self, session: Session, email_sender: EmailSender):
        self.session = session
        self.repository = UserRepository(session)
        self.email_sender = email_sender

    def request_password_reset(self, username: str) -> str:
        """
        Email a reset link if the account exists.

        Returns the same message either way so the response cannot be
        used to discover accounts. A new request replaces any earlier
        token.
        """
        user = self.repository.get_by_username(normalize_username(username))
        if user is None:
            logger.info("Password reset requested for unknown account %s", mask_email(username))
            return RESET_REQUESTED_MESSAGE

        user.reset_password_token = secrets.token_hex(32)
        user.reset_password_expires = datetime.utcnow() + timedelta(hours=settings.PASSWORD_RESET_EXPIRE_HOURS)
        user = self.repository.update(user)

        try:
            self.email_sender.send_password_reset_email(user.username, user.reset_password_token)
        except EmailDeliveryError as exc:
            # Same answer as for unknown accounts
            logger.error("Failed to send password reset email to %s: %s", mask_email(user.username), exc)
            return RESET_REQUESTED_MESSAGE

        audit.info("Password reset token issued for user id=%s", user.id)
        return RESET_REQUESTED_MESSAGE

    def reset_password(self, token: str, new_password: str) -> int:
        """
        Consume a reset token and set the new password.

        All sessions of the user are destroyed afterwards.

        Raises:
            AuthenticationError: Unknown, expired or already-used token

        Returns:
            The user id whose password changed
        """
        new_hash = get_password_hash(new_password)
        user_id = self.repository.consume_reset_token(token, new_hash, datetime.utcnow())
        if user_id is None:
            audit.info("Password reset rejected: invalid or expired token")
            raise AuthenticationError("Invalid or expired reset token")

        SessionAuthenticator(self.session).logout_everywhere(user_id)
        audit.info("Password reset completed for user id=%s", user_id)
        return user_id

    def send_verification(self, user: User) -> None:
        """Issue a fresh verification token and email it."""
        user.verification_token = secrets.token_hex(32)
        user.verification_token_expires = datetime.utcnow() + timedelta(hours=settings.EMAIL_VERIFICATION_EXPIRE_HOURS)
        user = self.repository.update(user)
        self.email_sender.send_verification_email(user.username, user.verification_token)

    def verify_email(self, token: str) -> User:
        """
        Mark the owner of *token* as verified.

        Raises:
            ValidationError: Unknown or expired token
        """
        user = self.repository.get_by_verification_token(token)
        if user is None:
            raise ValidationError("Invalid verification token")

        if user.verification_token_expires and user.verification_token_expires < datetime.utcnow():
            raise ValidationError("Verification token has expired")

        user.email_verified = True
        user.verification_token = None
        user.verification_token_expires = None
        user = self.repository.update(user)
        audit.info("Email verified for user id=%s", user.id)
        return user
