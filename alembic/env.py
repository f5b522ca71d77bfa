"""
Alembic environment for the FA Axis auth tables.

The database URL comes from ``alembic -x url=...`` when given, otherwise
from ``settings.DATABASE_URL`` (which honours ``DATABASE_URL_OVERRIDE``).
SQLite targets run in batch mode so ALTER TABLE migrations work there too.
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool
from sqlmodel import SQLModel

from faaxis.core.config import settings
# Registers User, AuthSession and AdminOtp on SQLModel.metadata
from faaxis.db.base import *  # noqa

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = SQLModel.metadata


def resolve_url() -> str:
    """Pick the target database: ``-x url=...`` first, then application settings."""
    return context.get_x_argument(as_dictionary=True).get("url") or settings.DATABASE_URL


def configure_options(url: str) -> dict:
    return {
        "target_metadata": target_metadata,
        "compare_type": True,
        "render_as_batch": url.startswith("sqlite"),
    }


def run_migrations_offline(url: str) -> None:
    """Emit SQL for *url*'s dialect to the script output without connecting."""
    context.configure(url=url, literal_binds=True, dialect_opts={ "paramstyle": "named" },
                      **configure_options(url))

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online(url: str) -> None:
    """Apply migrations over a live connection to *url*."""
    section = config.get_section(config.config_ini_section, { })
    section["sqlalchemy.url"] = url
    connectable = engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(connection=connection, **configure_options(url))

        with context.begin_transaction():
            context.run_migrations()


database_url = resolve_url()
if context.is_offline_mode():
    run_migrations_offline(database_url)
else:
    run_migrations_online(database_url)
