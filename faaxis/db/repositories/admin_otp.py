"""
Admin OTP repository.

Handles database operations for AdminOtp model.
"""

from typing import Optional

from sqlalchemy import case, update
from sqlmodel import Session

from faaxis.models.admin_otp import AdminOtp, OtpState


class AdminOtpRepository:
    """Repository for pending admin one-time codes."""

    def __init__(self, session: Session):
        self.session = session

    def create(self, otp: AdminOtp) -> AdminOtp:
        self.session.add(otp)
        self.session.commit()
        self.session.refresh(otp)
        return otp

    def get(self, otp_key: str) -> Optional[AdminOtp]:
        """Load the row from the database, discarding any copy held by this session."""
        return self.session.get(AdminOtp, otp_key, populate_existing=True)

    def delete(self, otp: AdminOtp) -> None:
        self.session.delete(otp)
        self.session.commit()

    def consume(self, otp_key: str) -> bool:
        """
        Move a pending code to ``authenticated``.

        Returns:
            True for the single caller that performed the transition
        """
        result = self.session.exec(
            update(AdminOtp)
            .where(AdminOtp.otp_key == otp_key, AdminOtp.state == OtpState.CODE_PENDING.value)
            .values(state=OtpState.AUTHENTICATED.value)
        )
        self.session.commit()
        return result.rowcount == 1

    def register_failure(self, otp_key: str, max_attempts: int) -> Optional[AdminOtp]:
        """
        Count one wrong code, moving the row to ``failed`` at *max_attempts*.

        The increment and the state change happen in the database in one
        statement, so concurrent wrong codes are all counted. Rows that
        are no longer pending are left untouched.

        Returns:
            The stored row after the update, or None if it is gone
        """
        self.session.exec(
            update(AdminOtp)
            .where(AdminOtp.otp_key == otp_key, AdminOtp.state == OtpState.CODE_PENDING.value)
            .values(attempts=AdminOtp.attempts + 1,
                    state=case((AdminOtp.attempts + 1 >= max_attempts, OtpState.FAILED.value),
                               else_=AdminOtp.state))
            .execution_options(synchronize_session=False)
        )
        self.session.commit()
        return self.get(otp_key)

    def mark_failed(self, otp_key: str) -> bool:
        """Move a pending row to ``failed``. Consumed rows stay ``authenticated``."""
        result = self.session.exec(
            update(AdminOtp)
            .where(AdminOtp.otp_key == otp_key, AdminOtp.state == OtpState.CODE_PENDING.value)
            .values(state=OtpState.FAILED.value)
            .execution_options(synchronize_session=False)
        )
        self.session.commit()
        return result.rowcount == 1
