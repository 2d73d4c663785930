"""Password hashing and signed access tokens."""
from datetime import datetime, timedelta, timezone

import jwt
from passlib.hash import pbkdf2_sha256 as hasher

from app.config import settings
from app.errors import UnauthenticatedError


def hash_password(password: str) -> str:
    return hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    try:
        return hasher.verify(password, password_hash)
    except ValueError:
        # malformed hash stored in the row
        return False


def create_access_token(user_id: int, expires_in: timedelta | None = None) -> str:
    """Issue a token whose subject is the user id."""
    now = datetime.now(timezone.utc)
    expires_in = expires_in or timedelta(hours=settings.JWT_EXPIRES_HOURS)
    payload = {"sub": str(user_id), "iat": now, "exp": now + expires_in}
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> int:
    """Return the user id carried by ``token``.

    Raises:
        UnauthenticatedError: If the token is expired, tampered with or malformed.
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise UnauthenticatedError("Token expired")
    except jwt.InvalidTokenError:
        raise UnauthenticatedError("Invalid token")

    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise UnauthenticatedError("Invalid token")
