"""Pydantic schemas for request/response validation."""

from faaxis.schemas.token import TokenAuthResponse, TokenClaims
from faaxis.schemas.user import (
    CurrentUserResponse,
    ForgotPasswordRequest,
    MessageResponse,
    ResetPasswordRequest,
    SessionAuthResponse,
    UserCreate,
    UserLogin,
    UserResponse,
    VerifyEmailRequest,
)
from faaxis.schemas.admin_auth import (
    AdminCodeRequest,
    AdminOtpResponse,
    AdminResetPasswordRequest,
    AdminResetRequest,
    AdminStatusResponse,
    AdminVerifiedResponse,
    AdminVerifyRequest,
)
from faaxis.schemas.totp import TotpSecretRequest, TotpSecretResponse, TotpVerifyRequest, TotpVerifyResponse

__all__ = [
    "TokenAuthResponse",
    "TokenClaims",
    "CurrentUserResponse",
    "ForgotPasswordRequest",
    "MessageResponse",
    "ResetPasswordRequest",
    "SessionAuthResponse",
    "UserCreate",
    "UserLogin",
    "UserResponse",
    "VerifyEmailRequest",
    "AdminCodeRequest",
    "AdminOtpResponse",
    "AdminResetPasswordRequest",
    "AdminResetRequest",
    "AdminStatusResponse",
    "AdminVerifiedResponse",
    "AdminVerifyRequest",
    "TotpSecretRequest",
    "TotpSecretResponse",
    "TotpVerifyRequest",
    "TotpVerifyResponse",
]
