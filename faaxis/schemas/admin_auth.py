"""Admin step-up API schemas."""

from pydantic import Field

from faaxis.schemas.user import CamelModel

OTP_CODE_PATTERN = r"^\d{6}$"


class AdminVerifyRequest(CamelModel):
    """Step 1: admin email and password."""
    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)


class AdminOtpResponse(CamelModel):
    otp_key: str
    message: str = "Verification code sent to your email"


class AdminCodeRequest(CamelModel):
    """Step 2: the key from step 1 and the 6-digit code."""
    otp_key: str = Field(..., min_length=1, max_length=64)
    code: str = Field(..., pattern=OTP_CODE_PATTERN)


class AdminVerifiedResponse(CamelModel):
    success: bool = True
    message: str = "Admin verified successfully"
    session_id: str


class AdminStatusResponse(CamelModel):
    authenticated: bool


class AdminResetRequest(CamelModel):
    email: str = Field(..., min_length=1, max_length=255)


class AdminResetPasswordRequest(CamelModel):
    otp_key: str = Field(..., min_length=1, max_length=64)
    code: str = Field(..., pattern=OTP_CODE_PATTERN)
    new_password: str = Field(..., min_length=8, max_length=128)
