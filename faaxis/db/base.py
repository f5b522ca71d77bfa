"""
Base database configuration.

Import all models here so Alembic can detect them for migrations.
"""

# Import all models for Alembic autogenerate
from faaxis.models.user import User  # noqa: F401
from faaxis.models.auth_session import AuthSession  # noqa: F401
from faaxis.models.admin_otp import AdminOtp  # noqa: F401
