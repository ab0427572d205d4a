"""Signed access and refresh tokens."""

import uuid
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from globalstay.config import settings

ACCESS = "access"
REFRESH = "refresh"


class TokenError(Exception):
    """The token is malformed, expired, of the wrong type, or has no usable subject."""


def _encode(subject: str, token_type: str, lifetime: timedelta) -> str:
    now = datetime.now(timezone.utc)
    claims = {"sub": subject, "type": token_type, "iat": now, "exp": now + lifetime}
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(user_id: str, expires_delta: timedelta | None = None) -> str:
    """Short-lived token presented as ``Authorization: Bearer``.

    Defaults to ``settings.jwt_access_token_expire_minutes``.
    """
    return _encode(user_id, ACCESS, expires_delta or timedelta(minutes=settings.jwt_access_token_expire_minutes))


def create_refresh_token(user_id: str, expires_delta: timedelta | None = None) -> str:
    """Long-lived token exchanged for a new pair at ``/auth/refresh``."""
    return _encode(user_id, REFRESH, expires_delta or timedelta(days=settings.jwt_refresh_token_expire_days))


def decode_token(token: str) -> dict:
    """Decode and verify a token.

    Raises:
        jose.JWTError: If the token is invalid, expired, or malformed.
    """
    return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])


def subject_from_token(token: str, expected_type: str) -> uuid.UUID:
    """Return the user id carried by a token of ``expected_type``.

    Raises:
        TokenError: On any decoding, type, or subject problem.
    """
    try:
        payload = decode_token(token)
    except JWTError:
        raise TokenError("Could not validate credentials") from None

    if payload.get("type") != expected_type:
        raise TokenError("Invalid token type")

    sub = payload.get("sub")
    if sub is None:
        raise TokenError("Invalid token payload")
    try:
        return uuid.UUID(sub)
    except ValueError:
        raise TokenError("Invalid token payload") from None


def create_token_pair(user_id: str) -> dict[str, str]:
    """Create both tokens for a user, shaped like ``TokenResponse``."""
    return {
        "access_token": create_access_token(user_id),
        "refresh_token": create_refresh_token(user_id),
        "token_type": "bearer",
    }
