"""
Session authenticator.

Cookie-backed server-side sessions. A session is either present and
unexpired (Authenticated) or absent (Anonymous); there are no
intermediate states.
"""

import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from faaxis.core.config import settings
from faaxis.core.errors import ServerError
from faaxis.core.logging_config import AUTH_LOGGER_NAME, mask_key
from faaxis.db.repositories.auth_session import AuthSessionRepository
from faaxis.models.auth_session import AuthSession
from faaxis.models.user import User
from faaxis.schemas.user import UserCreate
from faaxis.services.user_service import UserService

logger = logging.getLogger(__name__)
audit = logging.getLogger(AUTH_LOGGER_NAME)


class SessionAuthenticator:
    """Service for cookie-session login, logout and lookup."""

    def __init__(self, session: Session, user_service: Optional[UserService] = None):
        self.session = session
        self.repository = AuthSessionRepository(session)
        self.users = user_service or UserService(session)

    def login(self, username: str, password: str) -> tuple[User, AuthSession]:
        """
        Check credentials and open a session.

        Raises:
            AuthenticationError: If the user is unknown or the password is wrong
            ServerError: If the session could not be persisted
        """
        user = self.users.authenticate(username, password)
        auth_session = self.start(user)
        audit.info("Session login: user id=%s", user.id)
        return user, auth_session

    def register(self, user_data: UserCreate) -> tuple[User, AuthSession]:
        """Create the account and sign it in."""
        user = self.users.register(user_data)
        return user, self.start(user)

    def start(self, user: User, is_admin: bool = False) -> AuthSession:
        """
        Persist a new session for *user*.

        ``is_admin`` is only set by the admin step-up flow; a password
        login never yields an admin session.
        """
        now = datetime.utcnow()
        auth_session = AuthSession(id=secrets.token_urlsafe(32), user_id=user.id, is_admin=is_admin,
                                   created_at=now, expires_at=now + timedelta(days=settings.SESSION_EXPIRE_DAYS))
        try:
            return self.repository.create(auth_session)
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Failed to persist session for user id=%s: %s", user.id, exc)
            raise ServerError("Session creation failed") from exc

    def resolve(self, session_id: Optional[str]) -> Optional[tuple[AuthSession, User]]:
        """
        Return the live session and its user.

        Expired sessions and sessions whose user no longer exists are
        deleted and reported as absent.
        """
        if not session_id:
            return None

        auth_session = self.repository.get(session_id)
        if auth_session is None:
            return None

        if auth_session.expires_at <= datetime.utcnow():
            logger.info("Session %s expired", mask_key(session_id))
            self.repository.delete(session_id)
            return None

        user = self.users.get_user_by_id(auth_session.user_id)
        if user is None:
            logger.warning("Session %s references a missing user", mask_key(session_id))
            self.repository.delete(session_id)
            return None

        return auth_session, user

    def current_user(self, session_id: Optional[str]) -> Optional[User]:
        resolved = self.resolve(session_id)
        return resolved[1] if resolved else None

    def logout(self, session_id: Optional[str]) -> None:
        if session_id and self.repository.delete(session_id):
            audit.info("Session %s destroyed", mask_key(session_id))

    def logout_everywhere(self, user_id: int) -> int:
        count = self.repository.delete_for_user(user_id)
        if count:
            audit.info("Destroyed %d session(s) for user id=%s", count, user_id)
        return count

    def purge_expired(self) -> int:
        """Delete every session past its expiry."""
        count = self.repository.delete_expired(datetime.utcnow())
        if count:
            logger.info("Purged %d expired session(s)", count)
        return count
