"""
Application configuration using Pydantic Settings.

Loads configuration from environment variables (.env file).
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Project Info
    PROJECT_NAME: str = "FA Axis Authentication Service"
    VERSION: str = "0.1.0"
    PROJECT_URL: str = "https://faaxis.com"

    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    LOG_TO_FILE: bool = True

    # Database
    DATABASE_USER: str = "postgres"
    DATABASE_PASSWORD: str = ""
    DATABASE_HOST: str = "localhost"
    DATABASE_PORT: int = 5432
    DATABASE_DBNAME: str = "faaxis"
    DATABASE_URL_OVERRIDE: Optional[str] = None

    # Security
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_DAYS: int = 7
    BCRYPT_ROUNDS: int = 12

    # Sessions and cookies
    SESSION_EXPIRE_DAYS: int = 7
    SESSION_COOKIE_NAME: str = "faaxis_sid"
    TOKEN_COOKIE_NAME: str = "auth_token"
    COOKIE_SECURE: bool = False

    # Admin step-up
    ADMIN_EMAIL: str = ""
    ADMIN_PASSWORD_HASH: str = ""
    ADMIN_OTP_EXPIRE_MINUTES: int = 5
    ADMIN_RESET_OTP_EXPIRE_MINUTES: int = 15
    ADMIN_OTP_MAX_ATTEMPTS: int = 5

    # Account tokens
    PASSWORD_RESET_EXPIRE_HOURS: int = 1
    EMAIL_VERIFICATION_EXPIRE_HOURS: int = 24

    # TOTP
    TOTP_ISSUER: str = "FA Axis Admin"
    TOTP_VALID_WINDOW: int = 1

    # Email (MailerSend)
    MAILERSEND_API_KEY: str = ""
    MAILERSEND_API_URL: str = "https://api.mailersend.com/v1/email"
    MAIL_FROM_ADDRESS: str = "auth@faaxis.com"
    MAIL_FROM_NAME: str = "FA Axis"
    PUBLIC_BASE_URL: str = "http://localhost:5000"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    @property
    def DATABASE_URL(self) -> str:
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return (f"postgresql://{self.DATABASE_USER}:{self.DATABASE_PASSWORD}@{self.DATABASE_HOST}"
                f":{self.DATABASE_PORT}/{self.DATABASE_DBNAME}")

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


# Global settings instance
settings = Settings()
