"""
Token authentication endpoints.

Stateless equivalents of the session endpoints, plus the auth bridge
that upgrades a cookie session to a token.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Response, status
from sqlmodel import Session

from faaxis.api.cookies import clear_token_cookie, set_token_cookie
from faaxis.api.dependencies import get_email_sender, get_session_id, get_token_user
from faaxis.db.session import get_db
from faaxis.models.user import User
from faaxis.schemas.token import TokenAuthResponse
from faaxis.schemas.user import CurrentUserResponse, MessageResponse, UserCreate, UserLogin, UserResponse
from faaxis.services.auth_bridge import AuthBridge
from faaxis.services.email_service import EmailSender
from faaxis.services.token_service import TokenAuthenticator
from faaxis.services.user_service import UserService

router = APIRouter()


@router.post("/login",
             summary="Token login.",
             response_model=TokenAuthResponse)
def login(login_data: UserLogin, response: Response, db: Session = Depends(get_db)):
    user, token = TokenAuthenticator(db).login(login_data.username, login_data.password)
    set_token_cookie(response, token)
    return TokenAuthResponse(user=UserResponse.model_validate(user), token=token, message="Login successful")


@router.post("/register",
             summary="Token registration.",
             response_model=TokenAuthResponse,
             status_code=status.HTTP_201_CREATED)
def register(user_data: UserCreate, response: Response, db: Session = Depends(get_db),
             email_sender: EmailSender = Depends(get_email_sender)):
    authenticator = TokenAuthenticator(db, user_service=UserService(db, email_sender))
    user, token = authenticator.register(user_data)
    set_token_cookie(response, token)
    return TokenAuthResponse(user=UserResponse.model_validate(user), token=token,
                             message="User registered successfully")


@router.get("/auth-bridge",
            summary="Exchange the current session for a token.",
            response_model=TokenAuthResponse)
def auth_bridge(response: Response, session_id: Optional[str] = Depends(get_session_id),
                db: Session = Depends(get_db)):
    """
    Requires an active cookie session; no credentials are resubmitted.

    Raises:
        401: If there is no valid session
    """
    user, token = AuthBridge(db).bridge(session_id)
    set_token_cookie(response, token)
    return TokenAuthResponse(user=UserResponse.model_validate(user), token=token,
                             message="Session authentication bridged to JWT")


@router.get("/user",
            summary="Current token user.",
            response_model=CurrentUserResponse)
def current_user(user: User = Depends(get_token_user)):
    return CurrentUserResponse(user=UserResponse.model_validate(user))


@router.post("/logout",
             summary="Clear the token cookie.",
             response_model=MessageResponse)
def logout(response: Response):
    clear_token_cookie(response)
    return MessageResponse(message="Logout successful")
