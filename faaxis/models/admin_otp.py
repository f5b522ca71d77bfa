"""
Pending admin one-time code model.

Each row is one run of the admin step-up flow after the password
step succeeded. Only a SHA-256 digest of the code is stored.
"""

from datetime import datetime
from enum import Enum

from sqlmodel import Field, SQLModel


class OtpPurpose(str, Enum):
    LOGIN = "login"
    PASSWORD_RESET = "password_reset"


class OtpState(str, Enum):
    CODE_PENDING = "code_pending"
    AUTHENTICATED = "authenticated"
    FAILED = "failed"


class AdminOtp(SQLModel, table=True):
    """A one-time code issued to an admin, addressed by an opaque ``otp_key``."""

    __tablename__ = "admin_otps"

    otp_key: str = Field(primary_key=True, max_length=64)
    user_id: int = Field(foreign_key="users.id", nullable=False, index=True)
    purpose: str = Field(default=OtpPurpose.LOGIN.value, max_length=32, nullable=False)
    code_digest: str = Field(nullable=False, max_length=64)
    attempts: int = Field(default=0, nullable=False)
    state: str = Field(default=OtpState.CODE_PENDING.value, max_length=32, nullable=False)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    expires_at: datetime = Field(nullable=False)
