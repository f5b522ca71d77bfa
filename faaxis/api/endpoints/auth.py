"""
Session authentication endpoints.

Handles registration, login, logout and account recovery with
cookie-backed server-side sessions.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Response, status
from sqlmodel import Session

from faaxis.api.cookies import clear_session_cookie, set_session_cookie
from faaxis.api.dependencies import get_current_user, get_email_sender, get_session_id
from faaxis.db.session import get_db
from faaxis.models.user import User
from faaxis.schemas.user import (CurrentUserResponse, ForgotPasswordRequest, MessageResponse, ResetPasswordRequest,
                                 SessionAuthResponse, UserCreate, UserLogin, UserResponse, VerifyEmailRequest, )
from faaxis.services.account_service import AccountService
from faaxis.services.email_service import EmailSender
from faaxis.services.session_service import SessionAuthenticator
from faaxis.services.user_service import UserService

router = APIRouter()


@router.post("/register",
             summary="User registration endpoint.",
             response_model=SessionAuthResponse,
             status_code=status.HTTP_201_CREATED)
def register(user_data: UserCreate, response: Response, db: Session = Depends(get_db),
             email_sender: EmailSender = Depends(get_email_sender)):
    """
    Register a new user and sign them in.

    Returns:
        Created user data (without password) and the session id

    Raises:
        400: If the email is already registered
    """
    authenticator = SessionAuthenticator(db, user_service=UserService(db, email_sender))
    user, auth_session = authenticator.register(user_data)
    set_session_cookie(response, auth_session.id)
    return SessionAuthResponse(user=UserResponse.model_validate(user), session_id=auth_session.id)


@router.post("/login",
             summary="User login endpoint.",
             response_model=SessionAuthResponse)
def login(login_data: UserLogin, response: Response, db: Session = Depends(get_db)):
    """
    Authenticate with username (email) and password.

    Raises:
        401: Generic message, whichever check failed
    """
    user, auth_session = SessionAuthenticator(db).login(login_data.username, login_data.password)
    set_session_cookie(response, auth_session.id)
    return SessionAuthResponse(user=UserResponse.model_validate(user), session_id=auth_session.id)


@router.post("/logout",
             summary="Destroy the current session.",
             response_model=MessageResponse)
def logout(response: Response, session_id: Optional[str] = Depends(get_session_id), db: Session = Depends(get_db)):
    SessionAuthenticator(db).logout(session_id)
    clear_session_cookie(response)
    return MessageResponse(message="Logout successful")


@router.get("/user",
            summary="Current session user.",
            response_model=CurrentUserResponse)
def current_user(user: User = Depends(get_current_user)):
    return CurrentUserResponse(user=UserResponse.model_validate(user))


@router.post("/forgot-password",
             summary="Request a password reset email.",
             response_model=MessageResponse)
def forgot_password(data: ForgotPasswordRequest, db: Session = Depends(get_db),
                    email_sender: EmailSender = Depends(get_email_sender)):
    message = AccountService(db, email_sender).request_password_reset(data.username)
    return MessageResponse(message=message)


@router.post("/reset-password",
             summary="Set a new password with a reset token.",
             response_model=MessageResponse)
def reset_password(data: ResetPasswordRequest, db: Session = Depends(get_db),
                   email_sender: EmailSender = Depends(get_email_sender)):
    AccountService(db, email_sender).reset_password(data.token, data.password)
    return MessageResponse(message="Password reset successfully")


@router.post("/send-verification",
             summary="Resend the email verification link.",
             response_model=MessageResponse)
def send_verification(user: User = Depends(get_current_user), db: Session = Depends(get_db),
                      email_sender: EmailSender = Depends(get_email_sender)):
    AccountService(db, email_sender).send_verification(user)
    return MessageResponse(message="Verification email sent")


@router.post("/verify-email",
             summary="Confirm an email address.",
             response_model=MessageResponse)
def verify_email(data: VerifyEmailRequest, db: Session = Depends(get_db),
                 email_sender: EmailSender = Depends(get_email_sender)):
    AccountService(db, email_sender).verify_email(data.token)
    return MessageResponse(message="Email verified successfully")
