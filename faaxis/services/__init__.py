"""Business logic services."""

from faaxis.services.user_service import UserService
from faaxis.services.session_service import SessionAuthenticator
from faaxis.services.token_service import TokenAuthenticator
from faaxis.services.auth_bridge import AuthBridge
from faaxis.services.admin_auth_service import AdminStepUpService
from faaxis.services.account_service import AccountService
from faaxis.services.totp_service import TotpService
from faaxis.services.email_service import EmailSender

__all__ = [
    "UserService",
    "SessionAuthenticator",
    "TokenAuthenticator",
    "AuthBridge",
    "AdminStepUpService",
    "AccountService",
    "TotpService",
    "EmailSender",
]
