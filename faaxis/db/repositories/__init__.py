"""Database repositories."""

from faaxis.db.repositories.user import UserRepository
from faaxis.db.repositories.auth_session import AuthSessionRepository
from faaxis.db.repositories.admin_otp import AdminOtpRepository

__all__ = [
    "UserRepository",
    "AuthSessionRepository",
    "AdminOtpRepository",
]
