"""
Server-side session model.

A row per authenticated browser session, keyed by the random id
carried in the session cookie.
"""

from datetime import datetime

from sqlmodel import Field, SQLModel


class AuthSession(SQLModel, table=True):
    """Session store entry.

    Sessions have a fixed lifetime; they are not extended by use.
    """

    __tablename__ = "auth_sessions"

    id: str = Field(primary_key=True, max_length=64)
    user_id: int = Field(foreign_key="users.id", nullable=False, index=True)
    is_admin: bool = Field(default=False, nullable=False)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    expires_at: datetime = Field(nullable=False, index=True)
