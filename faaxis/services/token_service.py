"""
Token authenticator.

Stateless signed tokens for API clients. Tokens are never stored;
each request re-validates signature, expiry and the referenced user.
"""

import logging
from datetime import timedelta
from typing import Optional

from sqlmodel import Session

from faaxis.core.errors import InvalidSignature
from faaxis.core.logging_config import AUTH_LOGGER_NAME
from faaxis.core.security import create_access_token, decode_access_token
from faaxis.models.user import User
from faaxis.schemas.token import TokenClaims
from faaxis.schemas.user import UserCreate
from faaxis.services.user_service import UserService

logger = logging.getLogger(__name__)
audit = logging.getLogger(AUTH_LOGGER_NAME)


class TokenAuthenticator:
    """Issues and verifies access tokens."""

    def __init__(self, session: Session, user_service: Optional[UserService] = None):
        self.users = user_service or UserService(session)

    @staticmethod
    def issue(user: User, expires_delta: Optional[timedelta] = None) -> str:
        # Admin authority comes only from step-up sessions, never from a token
        claims = { "sub": str(user.id), "username": user.username }
        return create_access_token(claims, expires_delta=expires_delta)

    @staticmethod
    def verify(token: str) -> TokenClaims:
        """
        Check signature and expiry.

        Raises:
            InvalidSignature: Bad signature, malformed token or claims
            TokenExpired: Token is past its expiry
        """
        payload = decode_access_token(token)
        try:
            return TokenClaims.model_validate(payload)
        except ValueError as exc:
            raise InvalidSignature() from exc

    def authenticate(self, token: str) -> User:
        """
        Resolve a token to its user, failing closed if the user is gone.

        Raises:
            AuthenticationError: Invalid, expired, or orphaned token
        """
        claims = self.verify(token)
        user = self.users.get_user_by_id(claims.user_id)
        if user is None:
            logger.warning("Token for missing user id=%s rejected", claims.sub)
            raise InvalidSignature("User not found")
        return user

    def login(self, username: str, password: str) -> tuple[User, str]:
        user = self.users.authenticate(username, password)
        audit.info("Token login: user id=%s", user.id)
        return user, self.issue(user)

    def register(self, user_data: UserCreate) -> tuple[User, str]:
        user = self.users.register(user_data)
        return user, self.issue(user)
