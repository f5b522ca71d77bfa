"""
Session store repository.

Handles database operations for AuthSession model.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import delete
from sqlmodel import Session

from faaxis.models.auth_session import AuthSession


class AuthSessionRepository:
    """Repository for server-side session records."""

    def __init__(self, session: Session):
        self.session = session

    def create(self, auth_session: AuthSession) -> AuthSession:
        self.session.add(auth_session)
        self.session.commit()
        self.session.refresh(auth_session)
        return auth_session

    def get(self, session_id: str) -> Optional[AuthSession]:
        return self.session.get(AuthSession, session_id)

    def delete(self, session_id: str) -> bool:
        """Delete one session. Returns False if it did not exist."""
        result = self.session.exec(delete(AuthSession).where(AuthSession.id == session_id))
        self.session.commit()
        return result.rowcount > 0

    def delete_for_user(self, user_id: int) -> int:
        """Delete every session belonging to *user_id*."""
        result = self.session.exec(delete(AuthSession).where(AuthSession.user_id == user_id))
        self.session.commit()
        return result.rowcount

    def delete_expired(self, now: datetime) -> int:
        result = self.session.exec(delete(AuthSession).where(AuthSession.expires_at <= now))
        self.session.commit()
        return result.rowcount
