"""
User database model.

Defines the User table for authentication and user management.
"""

from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel


class User(SQLModel, table=True):
    """
    User model for authentication.

    Stores credentials, profile fields and the state of every
    account-level token (email verification, password reset, TOTP).
    The username is the user's email address.
    """
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(unique=True, index=True, max_length=255, nullable=False)
    hashed_password: str = Field(nullable=False)

    # Profile
    first_name: Optional[str] = Field(default=None, max_length=255)
    last_name: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)
    is_admin: bool = Field(default=False)
    is_premium: bool = Field(default=False)

    # Email verification
    email_verified: bool = Field(default=False)
    verification_token: Optional[str] = Field(default=None, index=True, max_length=128)
    verification_token_expires: Optional[datetime] = Field(default=None)

    # Password reset
    reset_password_token: Optional[str] = Field(default=None, index=True, max_length=128)
    reset_password_expires: Optional[datetime] = Field(default=None)

    # Two-factor authentication (TOTP)
    totp_secret: Optional[str] = Field(default=None, max_length=64)
    totp_enabled: bool = Field(default=False)
    totp_verified: bool = Field(default=False)

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
