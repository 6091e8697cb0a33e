"""Bearer tokens for the bookkeeping API (python-jose, HS256).

Claims: ``sub`` (user UUID as str), ``type`` ("access" | "refresh"),
``iss`` (settings.JWT_ISSUER), ``jti``, ``iat``, ``exp``. Decoding checks the
signature, expiry, issuer and that ``type`` matches what the caller expects,
so a refresh token can never authenticate a resource request.

Logout revokes tokens by ``jti`` (see token_denylist); the denylist is
consulted by the auth dependency and by refresh, not here.
"""

import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, Literal

from jose import JWTError, jwt

from config.settings import settings
from src.fb_common.errors import InvalidCredentialsError, InvalidRefreshTokenError

TokenType = Literal["access", "refresh"]

_ACCESS_EXPIRE = timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
_REFRESH_EXPIRE = timedelta(days=settings.JWT_REFRESH_EXPIRE_DAYS)


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


def _issue(user_id: str, token_type: TokenType, ttl: timedelta) -> str:
    now = datetime.now(UTC)
    claims = {
        "sub": user_id,
        "type": token_type,
        "iss": settings.JWT_ISSUER,
        "jti": uuid.uuid4().hex,
        "iat": now,
        "exp": now + ttl,
    }
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def create_access_token(user_id: str) -> str:
    return _issue(user_id, "access", _ACCESS_EXPIRE)


def create_refresh_token(user_id: str) -> str:
    return _issue(user_id, "refresh", _REFRESH_EXPIRE)


def issue_token_pair(user_id: str) -> TokenPair:
    return TokenPair(create_access_token(user_id), create_refresh_token(user_id))


def decode_token(token: str, expected_type: TokenType) -> dict[str, Any]:
    """Verify ``token`` and return its claims.

    Any failure raises the error that fits the expected use:
    InvalidCredentialsError (401) for access tokens,
    InvalidRefreshTokenError (401) for refresh tokens.
    """
    error = InvalidCredentialsError if expected_type == "access" else InvalidRefreshTokenError
    try:
        claims = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            issuer=settings.JWT_ISSUER,
        )
    except JWTError:
        raise error() from None

    if claims.get("type") != expected_type or not claims.get("sub"):
        raise error()
    return claims


def peek_subject(token: str) -> str | None:
    """``sub`` of a valid access token, else None. Used for rate-limit keys."""
    try:
        return str(decode_token(token, expected_type="access")["sub"])
    except InvalidCredentialsError:
        return None
