"""Security utilities: password hashing/verification and signed access tokens."""
import hashlib
import hmac
import logging
import re
import uuid
from datetime import datetime, timedelta
from typing import Any, Optional

import bcrypt
from fastapi.security import HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt

from faaxis.core.config import settings
from faaxis.core.errors import InvalidSignature, ServerError, TokenExpired

logger = logging.getLogger(__name__)

# Bearer header is optional: token clients may use the auth_token cookie instead
bearer_scheme = HTTPBearer(auto_error=False)

BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")

# bcrypt only considers the first 72 bytes of a password
_BCRYPT_MAX_BYTES = 72

# Legacy "hexdigest.salt" hashes: scrypt with N=16384, r=8, p=1, 64-byte key
_LEGACY_SCRYPT_N = 16384
_LEGACY_SCRYPT_R = 8
_LEGACY_SCRYPT_P = 1
_LEGACY_KEY_LENGTH = 64
_HEX_RE = re.compile(r"^[0-9a-fA-F]+$")


def _bcrypt_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def is_bcrypt_hash(hashed_password: str) -> bool:
    return hashed_password.startswith(BCRYPT_PREFIXES)


def get_password_hash(password: str) -> str:
    """Hash a password with bcrypt.

    Raises:
        ServerError: If hashing fails
    """
    try:
        salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
        return bcrypt.hashpw(_bcrypt_bytes(password), salt).decode("utf-8")
    except (ValueError, TypeError) as exc:
        logger.error("Password hashing failed: %s", exc)
        raise ServerError("Could not process password") from exc


def _legacy_digest(password: str, salt: str) -> bytes:
    return hashlib.scrypt(password.encode("utf-8"), salt=salt.encode("utf-8"), n=_LEGACY_SCRYPT_N,
                          r=_LEGACY_SCRYPT_R, p=_LEGACY_SCRYPT_P, dklen=_LEGACY_KEY_LENGTH,
                          maxmem=64 * 1024 * 1024)


def _verify_legacy(plain_password: str, hashed_password: str) -> bool:
    digest_hex, _, salt = hashed_password.partition(".")
    if not digest_hex or not salt:
        logger.warning("Legacy password hash is missing its digest or salt")
        return False
    if not _HEX_RE.match(digest_hex) or len(digest_hex) != _LEGACY_KEY_LENGTH * 2:
        logger.warning("Legacy password hash digest is not a %d-byte hex string", _LEGACY_KEY_LENGTH)
        return False

    expected = bytes.fromhex(digest_hex)
    supplied = _legacy_digest(plain_password, salt)
    return hmac.compare_digest(expected, supplied)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify a password against a stored hash.

    Supports bcrypt hashes and the legacy ``hexdigest.salt`` scrypt format.
    Never raises: malformed hashes and hashing errors are logged and
    reported as a mismatch.
    """
    if not plain_password or not hashed_password:
        return False

    try:
        if is_bcrypt_hash(hashed_password):
            return bcrypt.checkpw(_bcrypt_bytes(plain_password), hashed_password.encode("utf-8"))
        if "." in hashed_password:
            return _verify_legacy(plain_password, hashed_password)
    except (ValueError, TypeError) as exc:
        logger.error("Password verification error: %s", exc)
        return False

    logger.warning("Stored password hash has an unrecognised format")
    return False


def needs_rehash(hashed_password: str) -> bool:
    """Legacy hashes are upgraded to bcrypt after a successful login."""
    return not is_bcrypt_hash(hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed access token.

    Args:
        data: Claims to encode (``sub`` must be a string)
        expires_delta: Optional lifetime; defaults to ``ACCESS_TOKEN_EXPIRE_DAYS``

    Returns:
        Encoded JWT
    """
    to_encode = data.copy()
    now = datetime.utcnow()
    if expires_delta is None:
        expires_delta = timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS)

    to_encode.update({ "iat": now, "exp": now + expires_delta, "jti": uuid.uuid4().hex })
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str, secret_key: Optional[str] = None) -> dict[str, Any]:
    """Decode and verify a signed access token.

    Raises:
        TokenExpired: If the token is past its expiry
        InvalidSignature: If the signature does not match or the token is malformed
    """
    try:
        return jwt.decode(token, secret_key or settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except ExpiredSignatureError as exc:
        raise TokenExpired() from exc
    except JWTError as exc:
        raise InvalidSignature() from exc
