"""TOTP setup and verification schemas."""

from pydantic import Field

from faaxis.schemas.user import CamelModel


class TotpSecretRequest(CamelModel):
    username: str = Field(..., min_length=1, max_length=255)


class TotpSecretResponse(CamelModel):
    secret: str
    otpauth_url: str
    qr_code_url: str
    message: str = "TOTP setup initiated. Scan the QR code with your authenticator app."


class TotpVerifyRequest(CamelModel):
    username: str = Field(..., min_length=1, max_length=255)
    code: str = Field(..., pattern=r"^\d{6}$")


class TotpVerifyResponse(CamelModel):
    verified: bool
    totp_enabled: bool
