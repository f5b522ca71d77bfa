"""Centralized logging configuration for the application."""
import logging
import os
from logging.handlers import RotatingFileHandler

from faaxis.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Audit logger for authentication events (logins, OTP issuance, lockouts)
AUTH_LOGGER_NAME = "faaxis.auth"


def setup_logging() -> None:
    """Configure application-wide logging with console and rotating file handlers."""
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if not settings.LOG_TO_FILE:
        logging.info("Logging system initialized (console only)")
        return

    os.makedirs(settings.LOG_DIR, exist_ok=True)

    app_file_handler = RotatingFileHandler(
        os.path.join(settings.LOG_DIR, "app.log"),
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=10,
        encoding="utf-8",
    )
    app_file_handler.setLevel(level)
    app_file_handler.setFormatter(formatter)
    root_logger.addHandler(app_file_handler)

    error_file_handler = RotatingFileHandler(
        os.path.join(settings.LOG_DIR, "error.log"),
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5,
        encoding="utf-8",
    )
    error_file_handler.setLevel(logging.ERROR)
    error_file_handler.setFormatter(formatter)
    root_logger.addHandler(error_file_handler)

    auth_logger = logging.getLogger(AUTH_LOGGER_NAME)
    auth_file_handler = RotatingFileHandler(
        os.path.join(settings.LOG_DIR, "auth.log"),
        maxBytes=5 * 1024 * 1024,  # 5MB
        backupCount=20,
        encoding="utf-8",
    )
    auth_file_handler.setLevel(logging.INFO)
    auth_file_handler.setFormatter(formatter)
    auth_logger.addHandler(auth_file_handler)

    logging.info("Logging system initialized - logs saved to '%s' directory", settings.LOG_DIR)


def mask_email(email: str) -> str:
    """Mask an email address for log output (``ab***@example.com``)."""
    if not email or "@" not in email:
        return "***"
    local, domain = email.split("@", 1)
    return f"{local[:2]}***@{domain}"


def mask_key(value: str) -> str:
    """Truncate an opaque key or token for log output."""
    if not value:
        return "<none>"
    return f"{value[:8]}..."
