"""
TOTP service.

Authenticator-app secrets for routine admin two-factor login.
"""

import base64
import logging
from io import BytesIO
from typing import Optional

import pyotp
import qrcode
from sqlmodel import Session

from faaxis.core.config import settings
from faaxis.core.errors import ValidationError
from faaxis.core.logging_config import AUTH_LOGGER_NAME
from faaxis.db.repositories.user import UserRepository
from faaxis.models.user import User
from faaxis.services.user_service import normalize_username

audit = logging.getLogger(AUTH_LOGGER_NAME)


def verify_totp_code(secret: str, code: str, valid_window: Optional[int] = None) -> bool:
    """Check *code* against *secret*, tolerating ``valid_window`` steps of clock skew."""
    if not secret or not code:
        return False
    window = settings.TOTP_VALID_WINDOW if valid_window is None else valid_window
    return pyotp.TOTP(secret).verify(code, valid_window=window)


def qr_code_data_url(data: str) -> str:
    """Render *data* as a PNG QR code and return it as a data URL."""
    qr = qrcode.QRCode(version=1, box_size=10, border=4)
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")

    buffer = BytesIO()
    img.save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")


class TotpService:
    """Secret generation, verification and removal for a user's TOTP."""

    def __init__(self, session: Session):
        self.repository = UserRepository(session)

    def generate_secret(self, username: str) -> dict[str, str]:
        """
        Create and store a new secret; TOTP stays disabled until verified.

        Returns:
            ``secret``, ``otpauth_url`` and ``qr_code_url``
        """
        user = self._get_user(username)
        secret = pyotp.random_base32()
        otpauth_url = pyotp.TOTP(secret).provisioning_uri(name=user.username, issuer_name=settings.TOTP_ISSUER)

        user.totp_secret = secret
        user.totp_enabled = False
        user.totp_verified = False
        self.repository.update(user)
        audit.info("TOTP secret generated for user id=%s", user.id)

        return { "secret": secret, "otpauth_url": otpauth_url, "qr_code_url": qr_code_data_url(otpauth_url) }

    def verify(self, username: str, code: str) -> tuple[bool, User]:
        """
        Verify a code; the first success enables TOTP for the user.

        Raises:
            ValidationError: If the user has no TOTP secret
        """
        user = self._get_user(username)
        if not user.totp_secret:
            raise ValidationError("TOTP not set up for this account")

        if not verify_totp_code(user.totp_secret, code):
            audit.info("TOTP verification failed for user id=%s", user.id)
            return False, user

        if not user.totp_enabled:
            user.totp_enabled = True
            user.totp_verified = True
            user = self.repository.update(user)
            audit.info("TOTP enabled for user id=%s", user.id)
        return True, user

    def disable(self, username: str) -> User:
        user = self._get_user(username)
        user.totp_secret = None
        user.totp_enabled = False
        user.totp_verified = False
        audit.info("TOTP disabled for user id=%s", user.id)
        return self.repository.update(user)

    def _get_user(self, username: str) -> User:
        user = self.repository.get_by_username(normalize_username(username))
        if user is None:
            raise ValidationError("Unknown user")
        return user
