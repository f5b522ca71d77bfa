"""Cookie helpers for session ids and tokens."""

from fastapi import Response

from faaxis.core.config import settings


def _set(response: Response, key: str, value: str, max_age: int) -> None:
    response.set_cookie(key=key, value=value, max_age=max_age, path="/", httponly=True, samesite="lax",
                        secure=settings.COOKIE_SECURE)


def _clear(response: Response, key: str) -> None:
    response.delete_cookie(key=key, path="/", httponly=True, samesite="lax", secure=settings.COOKIE_SECURE)


def set_session_cookie(response: Response, session_id: str) -> None:
    _set(response, settings.SESSION_COOKIE_NAME, session_id, settings.SESSION_EXPIRE_DAYS * 24 * 60 * 60)


def clear_session_cookie(response: Response) -> None:
    _clear(response, settings.SESSION_COOKIE_NAME)


def set_token_cookie(response: Response, token: str) -> None:
    _set(response, settings.TOKEN_COOKIE_NAME, token, settings.ACCESS_TOKEN_EXPIRE_DAYS * 24 * 60 * 60)


def clear_token_cookie(response: Response) -> None:
    _clear(response, settings.TOKEN_COOKIE_NAME)
