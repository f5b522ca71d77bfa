"""
Admin step-up endpoints.

Password first, then a 6-digit code emailed to the admin (or the admin's
authenticator app). Only a completed step-up yields an admin session.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Response
from sqlmodel import Session

from faaxis.api.cookies import clear_session_cookie, set_session_cookie
from faaxis.api.dependencies import get_current_session, get_email_sender, get_session_id, require_admin
from faaxis.db.session import get_db
from faaxis.models.auth_session import AuthSession
from faaxis.models.user import User
from faaxis.schemas.admin_auth import (AdminCodeRequest, AdminOtpResponse, AdminResetPasswordRequest, AdminResetRequest,
                                       AdminStatusResponse, AdminVerifiedResponse, AdminVerifyRequest, )
from faaxis.schemas.user import CurrentUserResponse, MessageResponse, UserResponse
from faaxis.services.admin_auth_service import AdminStepUpService
from faaxis.services.email_service import EmailSender
from faaxis.services.session_service import SessionAuthenticator

router = APIRouter()


@router.post("/verify",
             summary="Admin step 1: password.",
             response_model=AdminOtpResponse)
def verify(data: AdminVerifyRequest, db: Session = Depends(get_db),
           email_sender: EmailSender = Depends(get_email_sender)):
    """
    Check the admin password and email a one-time code.

    Raises:
        401: Generic "Invalid admin credentials"
        500: If the code email could not be sent
    """
    otp = AdminStepUpService(db, email_sender).verify_password(data.email, data.password)
    return AdminOtpResponse(otp_key=otp.otp_key)


@router.post("/verify-code",
             summary="Admin step 2: emailed code.",
             response_model=AdminVerifiedResponse)
def verify_code(data: AdminCodeRequest, response: Response, db: Session = Depends(get_db),
                email_sender: EmailSender = Depends(get_email_sender)):
    """
    Redeem the emailed code and open an admin session.

    Raises:
        401: Unknown key, wrong or expired code, or too many attempts
    """
    _, auth_session = AdminStepUpService(db, email_sender).verify_code(data.otp_key, data.code)
    set_session_cookie(response, auth_session.id)
    return AdminVerifiedResponse(session_id=auth_session.id)


@router.post("/verify-totp",
             summary="Admin step 2: authenticator code.",
             response_model=AdminVerifiedResponse)
def verify_totp(data: AdminCodeRequest, response: Response, db: Session = Depends(get_db),
                email_sender: EmailSender = Depends(get_email_sender)):
    _, auth_session = AdminStepUpService(db, email_sender).verify_totp(data.otp_key, data.code)
    set_session_cookie(response, auth_session.id)
    return AdminVerifiedResponse(session_id=auth_session.id)


@router.get("/status",
            summary="Whether the caller holds an admin session.",
            response_model=AdminStatusResponse)
def admin_status(current: Optional[tuple[AuthSession, User]] = Depends(get_current_session)):
    if current is None:
        return AdminStatusResponse(authenticated=False)
    auth_session, user = current
    return AdminStatusResponse(authenticated=auth_session.is_admin and user.is_admin)


@router.post("/logout",
             summary="End the admin session.",
             response_model=MessageResponse)
def logout(response: Response, session_id: Optional[str] = Depends(get_session_id), db: Session = Depends(get_db)):
    SessionAuthenticator(db).logout(session_id)
    clear_session_cookie(response)
    return MessageResponse(message="Admin logout successful")


@router.post("/request-reset",
             summary="Start an admin password reset.",
             response_model=AdminOtpResponse)
def request_reset(data: AdminResetRequest, db: Session = Depends(get_db),
                  email_sender: EmailSender = Depends(get_email_sender)):
    otp_key = AdminStepUpService(db, email_sender).request_password_reset(data.email)
    return AdminOtpResponse(otp_key=otp_key, message="If this is an admin account, a reset code has been sent")


@router.post("/reset-password",
             summary="Set a new admin password with the reset code.",
             response_model=MessageResponse)
def reset_password(data: AdminResetPasswordRequest, response: Response, db: Session = Depends(get_db),
                   email_sender: EmailSender = Depends(get_email_sender)):
    AdminStepUpService(db, email_sender).reset_password(data.otp_key, data.code, data.new_password)
    clear_session_cookie(response)
    return MessageResponse(message="Admin password reset successfully")


@router.get("/me",
            summary="Current admin user.",
            response_model=CurrentUserResponse)
def current_admin(user: User = Depends(require_admin)):
    """
    Raises:
        401: No session
        403: The session did not come from the admin step-up flow
    """
    return CurrentUserResponse(user=UserResponse.model_validate(user))
