"""
Shared API dependencies.

Reusable FastAPI dependencies for authentication, database access and
email delivery.
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials
from sqlmodel import Session

from faaxis.core.config import settings
from faaxis.core.errors import ForbiddenError, Unauthenticated
from faaxis.core.security import bearer_scheme
from faaxis.db.session import get_db
from faaxis.models.auth_session import AuthSession
from faaxis.models.user import User
from faaxis.services.email_service import EmailSender
from faaxis.services.session_service import SessionAuthenticator
from faaxis.services.token_service import TokenAuthenticator

SESSION_HEADER = "X-Session-Id"


def get_email_sender() -> EmailSender:
    return EmailSender()


def get_session_id(request: Request) -> Optional[str]:
    """Session id from the session cookie, or the ``X-Session-Id`` header for non-browser clients."""
    return request.cookies.get(settings.SESSION_COOKIE_NAME) or request.headers.get(SESSION_HEADER)


def get_current_session(session_id: Optional[str] = Depends(get_session_id),
                        db: Session = Depends(get_db)) -> Optional[tuple[AuthSession, User]]:
    return SessionAuthenticator(db).resolve(session_id)


def get_current_user(current: Optional[tuple[AuthSession, User]] = Depends(get_current_session)) -> User:
    """Extract the user of the active cookie session."""
    if current is None:
        raise Unauthenticated()
    return current[1]


def require_admin(current: Optional[tuple[AuthSession, User]] = Depends(get_current_session)) -> User:
    """Allow only sessions established through the admin step-up flow."""
    if current is None:
        raise Unauthenticated("Authentication required")
    auth_session, user = current
    if not auth_session.is_admin or not user.is_admin:
        raise ForbiddenError()
    return user


def get_token(request: Request,
              credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)) -> Optional[str]:
    """Token from the ``Authorization: Bearer`` header, falling back to the token cookie."""
    if credentials is not None:
        return credentials.credentials
    return request.cookies.get(settings.TOKEN_COOKIE_NAME)


def get_token_user(token: Optional[str] = Depends(get_token), db: Session = Depends(get_db)) -> User:
    """Extract and validate the current user from a signed token."""
    if not token:
        raise Unauthenticated("Authentication required")
    return TokenAuthenticator(db).authenticate(token)
