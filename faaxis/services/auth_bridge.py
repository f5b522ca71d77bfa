"""
Auth bridge.

Upgrades an authenticated cookie session to a signed token for the
same user without asking for credentials again.
"""

import logging
from typing import Optional

from sqlmodel import Session

from faaxis.core.errors import Unauthenticated
from faaxis.core.logging_config import AUTH_LOGGER_NAME
from faaxis.models.user import User
from faaxis.services.session_service import SessionAuthenticator
from faaxis.services.token_service import TokenAuthenticator

audit = logging.getLogger(AUTH_LOGGER_NAME)


class AuthBridge:
    """Mints tokens from sessions. Calling it repeatedly mints fresh tokens."""

    def __init__(self, session: Session):
        self.sessions = SessionAuthenticator(session)
        self.tokens = TokenAuthenticator(session, user_service=self.sessions.users)

    def bridge(self, session_id: Optional[str]) -> tuple[User, str]:
        """
        Raises:
            Unauthenticated: If there is no live session
        """
        user = self.sessions.current_user(session_id)
        if user is None:
            raise Unauthenticated("Not authenticated with session")
        audit.info("Session bridged to token: user id=%s", user.id)
        return user, self.tokens.issue(user)
