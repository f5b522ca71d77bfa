"""
Admin step-up service.

Two-factor gate for administrative access:

    PasswordPending --(admin password ok)--> CodePending --(code ok)--> Authenticated
                                                  |
                                  (expired / max attempts)
                                                  v
                                                Failed

``PasswordPending`` has no stored representation: it is simply the
absence of a pending code. ``CodePending``, ``Authenticated`` and
``Failed`` are the ``state`` column of :class:`AdminOtp`. A failed or
consumed code can never be used again; the admin restarts from the
password step, which issues a new ``otp_key``.

The same machinery serves admin password resets (``purpose`` =
``password_reset``), and the code step may be satisfied by the admin's
enabled TOTP instead of the emailed code.
"""

import hashlib
import hmac
import logging
import secrets
import uuid
from datetime import datetime, timedelta
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from faaxis.core.config import settings
from faaxis.core.errors import GENERIC_ADMIN_FAILURE, AuthenticationError, OtpLocked, ServerError
from faaxis.core.logging_config import AUTH_LOGGER_NAME, mask_email, mask_key
from faaxis.core.security import get_password_hash, verify_password
from faaxis.db.repositories.admin_otp import AdminOtpRepository
from faaxis.db.repositories.user import UserRepository
from faaxis.models.admin_otp import AdminOtp, OtpPurpose, OtpState
from faaxis.models.auth_session import AuthSession
from faaxis.models.user import User
from faaxis.services.email_service import EmailDeliveryError, EmailSender
from faaxis.services.session_service import SessionAuthenticator
from faaxis.services.totp_service import verify_totp_code
from faaxis.services.user_service import UserService

logger = logging.getLogger(__name__)
audit = logging.getLogger(AUTH_LOGGER_NAME)

INVALID_KEY = "Invalid or expired verification key"
INVALID_CODE = "Invalid verification code"
EXPIRED_CODE = "Verification code has expired"


def generate_code() -> str:
    """Six random digits, zero padded."""
    return f"{secrets.randbelow(1_000_000):06d}"


def digest_code(code: str) -> str:
    return hashlib.sha256(code.encode("utf-8")).hexdigest()


class AdminStepUpService:
    """Runs the admin password + one-time code flow."""

    def __init__(self, session: Session, email_sender: EmailSender):
        self.session = session
        self.repository = AdminOtpRepository(session)
        self.users = UserService(session)
        self.user_repository = UserRepository(session)
        self.sessions = SessionAuthenticator(session, user_service=self.users)
        self.email_sender = email_sender

    # ------------------------------------------------------------------
    # Login
    # ------------------------------------------------------------------

    def verify_password(self, email: str, password: str) -> AdminOtp:
        """
        PasswordPending -> CodePending.

        Emails a fresh code to the admin and returns the pending record
        whose ``otp_key`` the client must present with the code.

        Raises:
            AuthenticationError: Generic, whether the email is unknown,
                not an admin, or the password is wrong
            EmailDeliveryError: If the code could not be sent
        """
        user = self.users.get_user_by_username(email)
        if user is None or not user.is_admin or not verify_password(password, user.hashed_password):
            audit.info("Admin password step failed for %s", mask_email(email))
            raise AuthenticationError(GENERIC_ADMIN_FAILURE)

        otp = self._issue(user, OtpPurpose.LOGIN)
        audit.info("Admin password step passed for user id=%s, key %s", user.id, mask_key(otp.otp_key))
        return otp

    def verify_code(self, otp_key: str, code: str) -> tuple[User, AuthSession]:
        """
        CodePending -> Authenticated using the emailed code.

        Opens an admin session on success.

        Raises:
            AuthenticationError: Unknown/used key, wrong or expired code
            OtpLocked: The flow is in (or just entered) the Failed state
        """
        user = self._complete(otp_key, OtpPurpose.LOGIN, self._matches_emailed_code(code))
        return user, self._open_admin_session(user)

    def verify_totp(self, otp_key: str, code: str) -> tuple[User, AuthSession]:
        """CodePending -> Authenticated using the admin's enabled TOTP."""
        user = self._complete(otp_key, OtpPurpose.LOGIN, self._matches_totp(code))
        return user, self._open_admin_session(user)

    # ------------------------------------------------------------------
    # Password reset
    # ------------------------------------------------------------------

    def request_password_reset(self, email: str) -> str:
        """
        Start an admin password reset.

        Always returns a key; for anything but an admin email it is a
        decoy that was never stored, so the response does not reveal
        whether the email belongs to an admin.
        """
        user = self.users.get_user_by_username(email)
        if user is None or not user.is_admin:
            logger.info("Admin reset requested for non-admin %s", mask_email(email))
            return uuid.uuid4().hex

        otp = self._issue(user, OtpPurpose.PASSWORD_RESET)
        audit.info("Admin password reset code issued for user id=%s", user.id)
        return otp.otp_key

    def reset_password(self, otp_key: str, code: str, new_password: str) -> User:
        """
        Set a new admin password once the reset code is verified.

        All of the admin's existing sessions are destroyed.
        """
        user = self._complete(otp_key, OtpPurpose.PASSWORD_RESET, self._matches_emailed_code(code))
        user.hashed_password = get_password_hash(new_password)
        try:
            user = self.user_repository.update(user)
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Failed to store new admin password for user id=%s: %s", user.id, exc)
            raise ServerError() from exc

        self.sessions.logout_everywhere(user.id)
        audit.info("Admin password reset completed for user id=%s", user.id)
        return user

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _issue(self, user: User, purpose: OtpPurpose) -> AdminOtp:
        if purpose == OtpPurpose.PASSWORD_RESET:
            lifetime = timedelta(minutes=settings.ADMIN_RESET_OTP_EXPIRE_MINUTES)
        else:
            lifetime = timedelta(minutes=settings.ADMIN_OTP_EXPIRE_MINUTES)

        code = generate_code()
        now = datetime.utcnow()
        otp = AdminOtp(otp_key=uuid.uuid4().hex, user_id=user.id, purpose=purpose.value, code_digest=digest_code(code),
                       created_at=now, expires_at=now + lifetime)
        try:
            otp = self.repository.create(otp)
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Failed to store admin OTP for user id=%s: %s", user.id, exc)
            raise ServerError() from exc

        try:
            self.email_sender.send_admin_code(user.username, code, purpose)
        except EmailDeliveryError:
            # A code nobody received must not stay redeemable
            self.repository.delete(otp)
            raise
        return otp

    def _complete(self, otp_key: str, purpose: OtpPurpose, matches: Callable[[AdminOtp, User], bool]) -> User:
        otp = self.repository.get(otp_key)
        if otp is None or otp.purpose != purpose.value or otp.state == OtpState.AUTHENTICATED.value:
            raise AuthenticationError(INVALID_KEY)
        if otp.state == OtpState.FAILED.value:
            raise OtpLocked()

        if otp.expires_at <= datetime.utcnow():
            self._fail(otp, "expired")
            raise AuthenticationError(EXPIRED_CODE)

        user = self.user_repository.get_by_id(otp.user_id)
        if user is None or not user.is_admin:
            self._fail(otp, "user no longer an admin")
            raise AuthenticationError(INVALID_KEY)

        if not matches(otp, user):
            # Lockout is decided from the stored counter, not from this copy of the row
            stored = self.repository.register_failure(otp_key, settings.ADMIN_OTP_MAX_ATTEMPTS)
            if stored is None or stored.state == OtpState.AUTHENTICATED.value:
                raise AuthenticationError(INVALID_KEY)
            if stored.state == OtpState.FAILED.value:
                audit.warning("Admin step-up for key %s locked after %d failed attempts", mask_key(otp_key),
                              stored.attempts)
                raise OtpLocked()
            audit.info("Wrong admin code for key %s (attempt %d)", mask_key(otp_key), stored.attempts)
            raise AuthenticationError(INVALID_CODE)

        if not self.repository.consume(otp_key):
            # Another request redeemed the same code first
            raise AuthenticationError(INVALID_KEY)
        return user

    def _fail(self, otp: AdminOtp, reason: str) -> None:
        otp_key = otp.otp_key
        if self.repository.mark_failed(otp_key):
            audit.warning("Admin step-up for key %s failed: %s", mask_key(otp_key), reason)

    def _open_admin_session(self, user: User) -> AuthSession:
        auth_session = self.sessions.start(user, is_admin=True)
        audit.info("Admin session established for user id=%s", user.id)
        return auth_session

    @staticmethod
    def _matches_emailed_code(code: str) -> Callable[[AdminOtp, User], bool]:
        def matches(otp: AdminOtp, user: User) -> bool:
            return hmac.compare_digest(digest_code(code), otp.code_digest)
        return matches

    @staticmethod
    def _matches_totp(code: str) -> Callable[[AdminOtp, User], bool]:
        def matches(otp: AdminOtp, user: User) -> bool:
            return bool(user.totp_enabled and user.totp_secret and verify_totp_code(user.totp_secret, code))
        return matches
