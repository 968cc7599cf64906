import logging
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import jwt, JWTError
from jose.exceptions import ExpiredSignatureError

from quickchat.config.settings import get_settings
from quickchat.errors import ExpiredTokenError, InvalidTokenError

logger = logging.getLogger("quickchat.auth")


def hash_password(password: str) -> str:
    """One-way salted bcrypt hash, stored as text."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    secret = password.encode("utf-8")
    if len(secret) > 72:
        # never hashable, so never a match
        return False
    # bcrypt.checkpw compares in constant time
    try:
        return bcrypt.checkpw(secret, password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is malformed")
        return False


def create_access_token(user_id, issued_at: datetime = None, expires_delta: timedelta = None) -> str:
    """Sign a token for ``user_id`` that expires 30 days (by default) after ``issued_at``."""
    settings = get_settings()
    issued_at = issued_at or datetime.now(timezone.utc)
    expires_delta = expires_delta or timedelta(days=settings.access_token_expire_days)
    claims = {
        "sub": str(user_id),
        "iat": issued_at,
        "exp": issued_at + expires_delta,
    }
    return jwt.encode(claims, settings.require_jwt_secret(), algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> int:
    """Return the user id a token was issued for.

    Raises ExpiredTokenError past its expiry and InvalidTokenError for anything
    else that fails verification.
    """
    settings = get_settings()
    if not token:
        raise InvalidTokenError("Not authorized, no token")
    try:
        payload = jwt.decode(token, settings.require_jwt_secret(), algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError:
        raise ExpiredTokenError()
    except JWTError:
        raise InvalidTokenError()

    user_id = payload.get("sub")
    if user_id is None:
        raise InvalidTokenError()
    try:
        return int(user_id)
    except (TypeError, ValueError):
        raise InvalidTokenError()
