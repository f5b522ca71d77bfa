"""Token schemas."""

from typing import Optional

from pydantic import field_validator

from faaxis.schemas.user import CamelModel, UserResponse


class TokenAuthResponse(CamelModel):
    """Returned by token login/registration and the auth bridge."""
    user: UserResponse
    token: str
    message: Optional[str] = None


class TokenClaims(CamelModel):
    """Schema for verified token claims."""
    sub: str
    username: str
    iat: int
    exp: int
    jti: Optional[str] = None

    @field_validator("sub")
    @classmethod
    def sub_is_user_id(cls, value: str) -> str:
        if not value.isdigit():
            raise ValueError("subject must be a numeric user id")
        return value

    @property
    def user_id(self) -> int:
        return int(self.sub)
