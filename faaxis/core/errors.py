"""
Application error taxonomy and FastAPI exception handlers.

Services raise these exceptions; the handlers registered in
:func:`register_exception_handlers` render them as ``{"message": ...}``
JSON bodies with the matching status code.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

GENERIC_LOGIN_FAILURE = "Invalid email or password. Please check your credentials and try again."
GENERIC_ADMIN_FAILURE = "Invalid admin credentials"


class AppError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    """Missing or malformed input."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class ConflictError(AppError):
    """Duplicate registration."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Email address already exists"


class AuthenticationError(AppError):
    """Bad credentials, or an expired/invalid token or code."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication failed"


class Unauthenticated(AuthenticationError):
    default_message = "Not authenticated"


class InvalidSignature(AuthenticationError):
    default_message = "Invalid token"


class TokenExpired(AuthenticationError):
    default_message = "Token has expired"


class OtpLocked(AuthenticationError):
    """The step-up flow reached its terminal failed state."""

    default_message = "Too many failed attempts. Please restart the login process."


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Admin access required"


class ServerError(AppError):
    """Database, hashing, session-store or delivery failure."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"


async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s: %s - %s", type(exc).__name__, exc.message, request.url.path)
    else:
        logger.info("HTTP %d %s - %s", exc.status_code, type(exc).__name__, request.url.path)
    return JSONResponse(status_code=exc.status_code, content={ "message": exc.message })


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    logger.warning("HTTP %d: %s - %s", exc.status_code, exc.detail, request.url.path)
    return JSONResponse(status_code=exc.status_code, content={ "message": exc.detail },
                        headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [{ "loc": list(err.get("loc", ())), "msg": err.get("msg", "") } for err in exc.errors()]
    logger.info("Validation error on %s: %s", request.url.path, errors)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST,
                        content={ "message": "Validation failed", "errors": errors })


async def general_exception_handler(request: Request, exc: Exception):
    logger.error("Unexpected error: %r - %s", exc, request.url.path, exc_info=exc)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                        content={ "message": "Internal server error" })


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the error handlers to *app*."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
