"""
Email delivery service.

Sends verification codes and account links through the MailerSend
HTTP API. Codes and tokens are never written to the logs.
"""

import logging
from typing import Optional

import httpx

from faaxis.core.config import Settings, settings as default_settings
from faaxis.core.errors import ServerError
from faaxis.core.logging_config import mask_email
from faaxis.models.admin_otp import OtpPurpose

logger = logging.getLogger(__name__)


class EmailDeliveryError(ServerError):
    default_message = "Email delivery failed - please try again later"


class EmailSender:
    """MailerSend client used for every outbound authentication email."""

    def __init__(self, settings: Settings = default_settings, client: Optional[httpx.Client] = None):
        self.settings = settings
        self._client = client

    def send_admin_code(self, to: str, code: str, purpose: OtpPurpose = OtpPurpose.LOGIN) -> None:
        if purpose == OtpPurpose.PASSWORD_RESET:
            subject = "Reset your FA Axis admin password"
            minutes = self.settings.ADMIN_RESET_OTP_EXPIRE_MINUTES
        else:
            subject = "Your FA Axis admin login code"
            minutes = self.settings.ADMIN_OTP_EXPIRE_MINUTES

        html = (
            "<p>Your verification code is:</p>"
            f'<h2 style="font-family:Inter,Arial,sans-serif;letter-spacing:2px">{code}</h2>'
            f"<p>This code expires in {minutes} minutes.</p>"
        )
        self.send(to, subject, html)
        logger.info("Admin verification email (%s) sent to %s", purpose.value, mask_email(to))

    def send_verification_email(self, to: str, token: str) -> None:
        link = f"{self.settings.PUBLIC_BASE_URL}/verify-email?token={token}"
        html = (
            "<p>Welcome to FA Axis!</p>"
            f'<p>Please confirm your email address by clicking <a href="{link}">this link</a>.</p>'
            f"<p>The link expires in {self.settings.EMAIL_VERIFICATION_EXPIRE_HOURS} hours.</p>"
        )
        self.send(to, "Verify your FA Axis email address", html)

    def send_password_reset_email(self, to: str, token: str) -> None:
        link = f"{self.settings.PUBLIC_BASE_URL}/reset-password?token={token}"
        html = (
            "<p>We received a request to reset your FA Axis password.</p>"
            f'<p><a href="{link}">Reset your password</a></p>'
            f"<p>The link expires in {self.settings.PASSWORD_RESET_EXPIRE_HOURS} hour(s). "
            "If you did not request this, you can ignore this email.</p>"
        )
        self.send(to, "Reset your FA Axis password", html)

    def send(self, to: str, subject: str, html: str) -> None:
        """Deliver one email.

        Raises:
            EmailDeliveryError: If delivery is not configured or the API rejects the request
        """
        if not self.settings.MAILERSEND_API_KEY:
            logger.error("Cannot send email to %s - MAILERSEND_API_KEY is not set", mask_email(to))
            raise EmailDeliveryError()

        payload = {
            "from": { "email": self.settings.MAIL_FROM_ADDRESS, "name": self.settings.MAIL_FROM_NAME },
            "to": [{ "email": to }],
            "subject": subject,
            "html": html,
        }
        headers = { "Authorization": f"Bearer {self.settings.MAILERSEND_API_KEY}" }

        try:
            if self._client is not None:
                response = self._client.post(self.settings.MAILERSEND_API_URL, json=payload, headers=headers)
            else:
                with httpx.Client(timeout=10.0) as client:
                    response = client.post(self.settings.MAILERSEND_API_URL, json=payload, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error("MailerSend delivery failed: %s %s", exc.response.status_code, exc.response.text[:200])
            raise EmailDeliveryError() from exc
        except httpx.HTTPError as exc:
            logger.error("MailerSend request error: %s", exc)
            raise EmailDeliveryError() from exc
