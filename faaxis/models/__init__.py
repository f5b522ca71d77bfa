"""SQLModel database models."""

from faaxis.models.user import User
from faaxis.models.auth_session import AuthSession
from faaxis.models.admin_otp import AdminOtp, OtpPurpose, OtpState

__all__ = [
    "User",
    "AuthSession",
    "AdminOtp",
    "OtpPurpose",
    "OtpState",
]
