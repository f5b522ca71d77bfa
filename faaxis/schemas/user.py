"""
User API schemas.

Pydantic models for user-related request/response validation.
JSON field names are camelCase on the wire.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema serialising to camelCase while accepting either case on input."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Request schemas
class UserCreate(CamelModel):
    """Schema for user registration."""
    username: EmailStr
    password: str = Field(..., min_length=8, max_length=128, description="Password (min 8 characters)")
    first_name: Optional[str] = Field(None, max_length=255)
    last_name: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)


class UserLogin(CamelModel):
    """Schema for user login."""
    username: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)


class ForgotPasswordRequest(CamelModel):
    username: str = Field(..., min_length=1, max_length=255)


class ResetPasswordRequest(CamelModel):
    token: str = Field(..., min_length=1, max_length=128)
    password: str = Field(..., min_length=8, max_length=128)


class VerifyEmailRequest(CamelModel):
    token: str = Field(..., min_length=1, max_length=128)


# Response schemas
class UserResponse(CamelModel):
    """Schema for user data in API responses (no sensitive data)."""
    id: int
    username: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    is_admin: bool
    is_premium: bool
    email_verified: bool
    totp_enabled: bool
    created_at: datetime

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class CurrentUserResponse(CamelModel):
    user: UserResponse


class SessionAuthResponse(CamelModel):
    """Returned by cookie-session login and registration."""
    user: UserResponse
    session_id: str


class MessageResponse(CamelModel):
    message: str
