"""
Unit tests for registration, credential checks and server-side sessions.
"""

from datetime import datetime, timedelta

import pytest

from faaxis.core.errors import GENERIC_LOGIN_FAILURE, AuthenticationError, ConflictError
from faaxis.core.security import is_bcrypt_hash, verify_password
from faaxis.models.auth_session import AuthSession
from faaxis.schemas.user import UserCreate
from faaxis.services.session_service import SessionAuthenticator
from faaxis.services.user_service import UserService

from conftest import USER_PASSWORD, legacy_hash


# ======================================================================
# Registration
# ======================================================================


class TestRegister:
    def test_register_stores_hash_and_sends_verification(self, db, outbox):
        service = UserService(db, outbox)
        user = service.register(UserCreate(username="Alice@Example.com", password=USER_PASSWORD,
                                           first_name="Alice"))

        assert user.id is not None
        assert user.username == "alice@example.com"
        assert is_bcrypt_hash(user.hashed_password)
        assert user.email_verified is False
        assert user.verification_token
        assert outbox.last.to == "alice@example.com"
        assert outbox.last.token == user.verification_token

    def test_duplicate_username_is_rejected(self, db, outbox):
        service = UserService(db, outbox)
        service.register(UserCreate(username="alice@example.com", password=USER_PASSWORD))
        with pytest.raises(ConflictError):
            service.register(UserCreate(username="ALICE@example.com", password=USER_PASSWORD))

    def test_email_outage_does_not_block_registration(self, db, outbox):
        outbox.fail = True
        user = UserService(db, outbox).register(UserCreate(username="bob@example.com", password=USER_PASSWORD))
        assert user.id is not None
        assert outbox.sent == []


# ======================================================================
# Credentials
# ======================================================================


class TestAuthenticate:
    def test_valid_credentials(self, db, user_factory):
        user = user_factory()
        assert UserService(db).authenticate("alice@example.com", USER_PASSWORD).id == user.id

    def test_wrong_password_and_unknown_user_look_the_same(self, db, user_factory):
        user_factory()
        service = UserService(db)
        with pytest.raises(AuthenticationError) as wrong_password:
            service.authenticate("alice@example.com", "nope-nope")
        with pytest.raises(AuthenticationError) as unknown_user:
            service.authenticate("nobody@example.com", USER_PASSWORD)
        assert wrong_password.value.message == unknown_user.value.message == GENERIC_LOGIN_FAILURE

    def test_legacy_hash_is_upgraded_on_login(self, db, user_factory):
        user = user_factory(hashed_password=legacy_hash(USER_PASSWORD, "0123456789abcdef"))
        UserService(db).authenticate("alice@example.com", USER_PASSWORD)

        db.refresh(user)
        assert is_bcrypt_hash(user.hashed_password)
        assert verify_password(USER_PASSWORD, user.hashed_password)


# ======================================================================
# Sessions
# ======================================================================


class TestSessionAuthenticator:
    def test_login_opens_non_admin_session(self, db, user_factory):
        user = user_factory(is_admin=True)
        logged_in, auth_session = SessionAuthenticator(db).login("alice@example.com", USER_PASSWORD)

        assert logged_in.id == user.id
        assert auth_session.user_id == user.id
        assert auth_session.is_admin is False
        assert auth_session.expires_at - auth_session.created_at == timedelta(days=7)

    def test_resolve_returns_session_user(self, db, user_factory):
        user = user_factory()
        authenticator = SessionAuthenticator(db)
        auth_session = authenticator.start(user)
        assert authenticator.current_user(auth_session.id).id == user.id

    def test_unknown_and_missing_ids_resolve_to_none(self, db):
        authenticator = SessionAuthenticator(db)
        assert authenticator.resolve(None) is None
        assert authenticator.resolve("no-such-session") is None

    def test_expired_session_is_removed(self, db, user_factory):
        user = user_factory()
        authenticator = SessionAuthenticator(db)
        auth_session = authenticator.start(user)
        session_id = auth_session.id
        auth_session.expires_at = datetime.utcnow() - timedelta(seconds=1)
        db.add(auth_session)
        db.commit()

        assert authenticator.resolve(session_id) is None
        assert db.get(AuthSession, session_id) is None

    def test_logout_destroys_session(self, db, user_factory):
        user = user_factory()
        authenticator = SessionAuthenticator(db)
        session_id = authenticator.start(user).id
        authenticator.logout(session_id)
        assert authenticator.resolve(session_id) is None

    def test_logout_without_session_is_harmless(self, db):
        SessionAuthenticator(db).logout(None)
        SessionAuthenticator(db).logout("never-existed")

    def test_logout_everywhere(self, db, user_factory):
        user = user_factory()
        authenticator = SessionAuthenticator(db)
        first, second = authenticator.start(user).id, authenticator.start(user).id
        assert first != second
        assert authenticator.logout_everywhere(user.id) == 2
        assert authenticator.resolve(first) is None

    def test_purge_expired(self, db, user_factory):
        user = user_factory()
        authenticator = SessionAuthenticator(db)
        live, stale = authenticator.start(user), authenticator.start(user)
        stale.expires_at = datetime.utcnow() - timedelta(minutes=1)
        db.add(stale)
        db.commit()

        assert authenticator.purge_expired() == 1
        assert authenticator.resolve(live.id) is not None
