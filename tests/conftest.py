"""Shared fixtures: in-memory database, recording email sender and HTTP client."""

import hashlib
import os
import re
from dataclasses import dataclass

# Settings are read at import time; configure them before importing faaxis
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["LOG_TO_FILE"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["DATABASE_URL_OVERRIDE"] = "sqlite://"
os.environ["MAILERSEND_API_KEY"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

import faaxis.db.base  # noqa: F401
from faaxis.api.dependencies import get_email_sender
from faaxis.core.security import get_password_hash
from faaxis.db.session import get_db
from faaxis.main import app
from faaxis.models.user import User
from faaxis.services.email_service import EmailDeliveryError, EmailSender

ADMIN_EMAIL = "admin@faaxis.com"
ADMIN_PASSWORD = "Adm1n-Passw0rd"
USER_PASSWORD = "s3cret-Passw0rd"

_CODE_RE = re.compile(r">(\d{6})</h2>")
_TOKEN_RE = re.compile(r"token=([0-9a-f]+)")


def legacy_hash(password: str, salt: str) -> str:
    """Old-format ``hexdigest.salt`` hash: scrypt N=16384, r=8, p=1, 64-byte key."""
    digest = hashlib.scrypt(password.encode("utf-8"), salt=salt.encode("utf-8"), n=16384, r=8, p=1, dklen=64,
                            maxmem=64 * 1024 * 1024)
    return f"{digest.hex()}.{salt}"


# ======================================================================
# Email
# ======================================================================


@dataclass
class SentEmail:
    to: str
    subject: str
    html: str

    @property
    def code(self) -> str:
        return _CODE_RE.search(self.html).group(1)

    @property
    def token(self) -> str:
        return _TOKEN_RE.search(self.html).group(1)


class RecordingEmailSender(EmailSender):
    """Keeps outgoing messages in memory; set ``fail`` to simulate an outage."""

    def __init__(self):
        super().__init__()
        self.sent: list[SentEmail] = []
        self.fail = False

    def send(self, to: str, subject: str, html: str) -> None:
        if self.fail:
            raise EmailDeliveryError()
        self.sent.append(SentEmail(to, subject, html))

    @property
    def last(self) -> SentEmail:
        return self.sent[-1]


# ======================================================================
# Database
# ======================================================================


@pytest.fixture
def engine():
    engine = create_engine("sqlite://", connect_args={ "check_same_thread": False }, poolclass=StaticPool)
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def outbox() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture
def user_factory(db):
    """Insert a user directly, bypassing registration."""

    def create(username: str = "alice@example.com", password: str = USER_PASSWORD, **fields) -> User:
        hashed = fields.pop("hashed_password", None) or get_password_hash(password)
        user = User(username=username, hashed_password=hashed, **fields)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return create


@pytest.fixture
def admin(user_factory) -> User:
    return user_factory(username=ADMIN_EMAIL, password=ADMIN_PASSWORD, is_admin=True, email_verified=True)


# ======================================================================
# HTTP
# ======================================================================


@pytest.fixture
def client(db, outbox):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_email_sender] = lambda: outbox
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
