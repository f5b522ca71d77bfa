"""
Unit tests for the admin step-up flow.

Covers the password step, the emailed code (attempt counting, lockout,
expiry, single use), the TOTP alternative and the admin password reset.
"""

from datetime import datetime, timedelta

import pyotp
import pytest
from sqlmodel import Session, select

from faaxis.core.errors import GENERIC_ADMIN_FAILURE, AuthenticationError, OtpLocked
from faaxis.core.security import verify_password
from faaxis.db.repositories.admin_otp import AdminOtpRepository
from faaxis.models.admin_otp import AdminOtp, OtpPurpose, OtpState
from faaxis.services.admin_auth_service import (
    EXPIRED_CODE,
    INVALID_CODE,
    INVALID_KEY,
    AdminStepUpService,
    digest_code,
    generate_code,
)
from faaxis.services.email_service import EmailDeliveryError
from faaxis.services.session_service import SessionAuthenticator

from conftest import ADMIN_EMAIL, ADMIN_PASSWORD, USER_PASSWORD


# ======================================================================
# Helpers
# ======================================================================


def _wrong(code: str) -> str:
    return "000000" if code != "000000" else "111111"


@pytest.fixture
def service(db, outbox, admin):
    return AdminStepUpService(db, outbox)


# ======================================================================
# Code generation
# ======================================================================


class TestCodes:
    def test_code_is_six_digits(self):
        for _ in range(50):
            code = generate_code()
            assert len(code) == 6 and code.isdigit()

    def test_only_digest_is_stored(self, db, service, outbox):
        otp = service.verify_password(ADMIN_EMAIL, ADMIN_PASSWORD)
        stored = db.get(AdminOtp, otp.otp_key)
        assert stored.code_digest == digest_code(outbox.last.code)


# ======================================================================
# Password step
# ======================================================================


class TestPasswordStep:
    def test_correct_password_issues_pending_code(self, service, outbox):
        otp = service.verify_password(ADMIN_EMAIL, ADMIN_PASSWORD)

        assert otp.state == OtpState.CODE_PENDING.value
        assert otp.purpose == OtpPurpose.LOGIN.value
        assert otp.attempts == 0
        assert otp.expires_at - otp.created_at == timedelta(minutes=5)
        assert outbox.last.to == ADMIN_EMAIL

    def test_each_attempt_gets_a_new_key(self, service):
        first = service.verify_password(ADMIN_EMAIL, ADMIN_PASSWORD)
        second = service.verify_password(ADMIN_EMAIL, ADMIN_PASSWORD)
        assert first.otp_key != second.otp_key

    @pytest.mark.parametrize("email, password", [
        (ADMIN_EMAIL, "wrong-password"),
        ("nobody@faaxis.com", ADMIN_PASSWORD),
        ("alice@example.com", USER_PASSWORD),
    ])
    def test_failures_share_one_message(self, service, user_factory, outbox, email, password):
        user_factory()
        with pytest.raises(AuthenticationError) as exc:
            service.verify_password(email, password)
        assert exc.value.message == GENERIC_ADMIN_FAILURE
        assert outbox.sent == []

    def test_email_outage_leaves_no_pending_code(self, db, service, outbox):
        outbox.fail = True
        with pytest.raises(EmailDeliveryError):
            service.verify_password(ADMIN_EMAIL, ADMIN_PASSWORD)
        assert db.exec(select(AdminOtp)).all() == []


# ======================================================================
# Code step
# ======================================================================


class TestCodeStep:
    def test_correct_code_opens_admin_session(self, db, service, outbox, admin):
        otp = service.verify_password(ADMIN_EMAIL, ADMIN_PASSWORD)
        user, auth_session = service.verify_code(otp.otp_key, outbox.last.code)

        assert user.id == admin.id
        assert auth_session.is_admin is True
        assert SessionAuthenticator(db).resolve(auth_session.id) is not None

    def test_code_is_single_use(self, service, outbox):
        otp = service.verify_password(ADMIN_EMAIL, ADMIN_PASSWORD)
        code = outbox.last.code
        service.verify_code(otp.otp_key, code)

        with pytest.raises(AuthenticationError) as exc:
            service.verify_code(otp.otp_key, code)
        assert exc.value.message == INVALID_KEY

    def test_unknown_key(self, service):
        with pytest.raises(AuthenticationError) as exc:
            service.verify_code("no-such-key", "123456")
        assert exc.value.message == INVALID_KEY

    def test_wrong_code_counts_attempts(self, db, service, outbox):
        otp = service.verify_password(ADMIN_EMAIL, ADMIN_PASSWORD)
        with pytest.raises(AuthenticationError) as exc:
            service.verify_code(otp.otp_key, _wrong(outbox.last.code))

        assert not isinstance(exc.value, OtpLocked)
        assert exc.value.message == INVALID_CODE
        assert db.get(AdminOtp, otp.otp_key).attempts == 1

    def test_fifth_wrong_code_locks_the_flow(self, db, service, outbox):
        otp = service.verify_password(ADMIN_EMAIL, ADMIN_PASSWORD)
        code = outbox.last.code
        for _ in range(4):
            with pytest.raises(AuthenticationError) as exc:
                service.verify_code(otp.otp_key, _wrong(code))
            assert not isinstance(exc.value, OtpLocked)

        with pytest.raises(OtpLocked):
            service.verify_code(otp.otp_key, _wrong(code))
        assert db.get(AdminOtp, otp.otp_key).state == OtpState.FAILED.value

        # Even the right code is refused once locked
        with pytest.raises(OtpLocked):
            service.verify_code(otp.otp_key, code)

    def test_wrong_code_then_right_code_succeeds(self, service, outbox):
        otp = service.verify_password(ADMIN_EMAIL, ADMIN_PASSWORD)
        code = outbox.last.code
        with pytest.raises(AuthenticationError):
            service.verify_code(otp.otp_key, _wrong(code))
        _, auth_session = service.verify_code(otp.otp_key, code)
        assert auth_session.is_admin is True

    def test_expired_code_fails_the_flow(self, db, service, outbox):
        otp = service.verify_password(ADMIN_EMAIL, ADMIN_PASSWORD)
        code = outbox.last.code
        otp.expires_at = datetime.utcnow() - timedelta(seconds=1)
        db.add(otp)
        db.commit()

        with pytest.raises(AuthenticationError) as exc:
            service.verify_code(otp.otp_key, code)
        assert exc.value.message == EXPIRED_CODE
        with pytest.raises(OtpLocked):
            service.verify_code(otp.otp_key, code)

    def test_restart_after_lockout_gets_fresh_attempts(self, service, outbox):
        locked = service.verify_password(ADMIN_EMAIL, ADMIN_PASSWORD)
        for _ in range(5):
            with pytest.raises(AuthenticationError):
                service.verify_code(locked.otp_key, _wrong(outbox.last.code))

        fresh = service.verify_password(ADMIN_EMAIL, ADMIN_PASSWORD)
        _, auth_session = service.verify_code(fresh.otp_key, outbox.last.code)
        assert auth_session.is_admin is True

    def test_demoted_admin_cannot_finish(self, db, service, outbox, admin):
        otp = service.verify_password(ADMIN_EMAIL, ADMIN_PASSWORD)
        admin.is_admin = False
        db.add(admin)
        db.commit()

        with pytest.raises(AuthenticationError):
            service.verify_code(otp.otp_key, outbox.last.code)
        assert db.get(AdminOtp, otp.otp_key).state == OtpState.FAILED.value


# ======================================================================
# Requests in flight at the same time
# ======================================================================


class TestConcurrentRequests:
    """Each request gets its own database session, as it would in the app."""

    def test_stale_request_cannot_reset_the_attempt_counter(self, engine, outbox, admin):
        with Session(engine) as first, Session(engine) as second:
            request_a = AdminStepUpService(first, outbox)
            request_b = AdminStepUpService(second, outbox)
            otp_key = request_a.verify_password(ADMIN_EMAIL, ADMIN_PASSWORD).otp_key
            code = outbox.last.code

            # Request B has the pending row loaded before A's guesses land
            assert second.get(AdminOtp, otp_key).attempts == 0

            for _ in range(4):
                with pytest.raises(AuthenticationError):
                    request_a.verify_code(otp_key, _wrong(code))

            with pytest.raises(OtpLocked):
                request_b.verify_code(otp_key, _wrong(code))

            stored = first.get(AdminOtp, otp_key, populate_existing=True)
            assert stored.attempts == 5
            assert stored.state == OtpState.FAILED.value

            with pytest.raises(OtpLocked):
                request_a.verify_code(otp_key, code)

    def test_correct_code_redeemed_once(self, engine, outbox, admin):
        with Session(engine) as first, Session(engine) as second:
            request_a = AdminStepUpService(first, outbox)
            request_b = AdminStepUpService(second, outbox)
            otp_key = request_a.verify_password(ADMIN_EMAIL, ADMIN_PASSWORD).otp_key
            code = outbox.last.code
            second.get(AdminOtp, otp_key)

            _, auth_session = request_a.verify_code(otp_key, code)
            assert auth_session.is_admin is True

            with pytest.raises(AuthenticationError) as exc:
                request_b.verify_code(otp_key, code)
            assert exc.value.message == INVALID_KEY

    def test_late_failure_does_not_undo_a_redeemed_code(self, engine, outbox, admin):
        with Session(engine) as first, Session(engine) as second:
            request_a = AdminStepUpService(first, outbox)
            otp_key = request_a.verify_password(ADMIN_EMAIL, ADMIN_PASSWORD).otp_key
            request_a.verify_code(otp_key, outbox.last.code)

            repository = AdminOtpRepository(second)
            assert repository.mark_failed(otp_key) is False
            assert repository.register_failure(otp_key, 5).state == OtpState.AUTHENTICATED.value
            assert repository.get(otp_key).attempts == 0


# ======================================================================
# TOTP as second factor
# ======================================================================


class TestTotpStep:
    def test_enabled_totp_completes_login(self, db, service, admin):
        secret = pyotp.random_base32()
        admin.totp_secret = secret
        admin.totp_enabled = True
        db.add(admin)
        db.commit()

        otp = service.verify_password(ADMIN_EMAIL, ADMIN_PASSWORD)
        _, auth_session = service.verify_totp(otp.otp_key, pyotp.TOTP(secret).now())
        assert auth_session.is_admin is True

    def test_totp_not_enabled_counts_as_wrong_code(self, db, service):
        otp = service.verify_password(ADMIN_EMAIL, ADMIN_PASSWORD)
        with pytest.raises(AuthenticationError) as exc:
            service.verify_totp(otp.otp_key, "123456")
        assert exc.value.message == INVALID_CODE
        assert db.get(AdminOtp, otp.otp_key).attempts == 1


# ======================================================================
# Admin password reset
# ======================================================================


class TestAdminPasswordReset:
    def test_reset_with_emailed_code(self, db, service, outbox, admin):
        old_session_id = SessionAuthenticator(db).start(admin, is_admin=True).id
        otp_key = service.request_password_reset(ADMIN_EMAIL)
        otp = db.get(AdminOtp, otp_key)
        assert otp.purpose == OtpPurpose.PASSWORD_RESET.value
        assert otp.expires_at - otp.created_at == timedelta(minutes=15)

        service.reset_password(otp_key, outbox.last.code, "brand-new-Passw0rd")

        db.refresh(admin)
        assert verify_password("brand-new-Passw0rd", admin.hashed_password)
        assert SessionAuthenticator(db).resolve(old_session_id) is None

    def test_non_admin_gets_decoy_key(self, db, service, outbox, user_factory):
        user_factory()
        otp_key = service.request_password_reset("alice@example.com")
        assert otp_key
        assert db.get(AdminOtp, otp_key) is None
        assert outbox.sent == []

    def test_login_code_cannot_reset_password(self, service, outbox):
        otp = service.verify_password(ADMIN_EMAIL, ADMIN_PASSWORD)
        with pytest.raises(AuthenticationError) as exc:
            service.reset_password(otp.otp_key, outbox.last.code, "brand-new-Passw0rd")
        assert exc.value.message == INVALID_KEY
