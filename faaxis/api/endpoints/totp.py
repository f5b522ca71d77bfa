"""
TOTP management endpoints.

A signed-in user manages their own authenticator secret; an admin
session may manage any account.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlmodel import Session

from faaxis.api.dependencies import get_current_session
from faaxis.core.errors import ForbiddenError, Unauthenticated
from faaxis.db.session import get_db
from faaxis.models.auth_session import AuthSession
from faaxis.models.user import User
from faaxis.schemas.totp import TotpSecretRequest, TotpSecretResponse, TotpVerifyRequest, TotpVerifyResponse
from faaxis.schemas.user import MessageResponse
from faaxis.services.totp_service import TotpService
from faaxis.services.user_service import normalize_username

router = APIRouter()


def _check_owner(username: str, current: Optional[tuple[AuthSession, User]]) -> None:
    if current is None:
        raise Unauthenticated()
    auth_session, user = current
    if auth_session.is_admin and user.is_admin:
        return
    if normalize_username(username) != user.username:
        raise ForbiddenError("Cannot manage TOTP for another account")


@router.post("/generate-totp-secret",
             summary="Create a new TOTP secret and QR code.",
             response_model=TotpSecretResponse)
def generate_totp_secret(data: TotpSecretRequest, db: Session = Depends(get_db),
                         current: Optional[tuple[AuthSession, User]] = Depends(get_current_session)):
    _check_owner(data.username, current)
    return TotpSecretResponse(**TotpService(db).generate_secret(data.username))


@router.post("/verify-totp",
             summary="Verify a TOTP code; the first success enables TOTP.",
             response_model=TotpVerifyResponse)
def verify_totp(data: TotpVerifyRequest, db: Session = Depends(get_db),
                current: Optional[tuple[AuthSession, User]] = Depends(get_current_session)):
    _check_owner(data.username, current)
    verified, user = TotpService(db).verify(data.username, data.code)
    return TotpVerifyResponse(verified=verified, totp_enabled=user.totp_enabled)


@router.post("/disable-totp",
             summary="Remove the TOTP secret.",
             response_model=MessageResponse)
def disable_totp(data: TotpSecretRequest, db: Session = Depends(get_db),
                 current: Optional[tuple[AuthSession, User]] = Depends(get_current_session)):
    _check_owner(data.username, current)
    TotpService(db).disable(data.username)
    return MessageResponse(message="TOTP disabled")
