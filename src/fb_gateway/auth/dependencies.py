"""Resolve the bearer token into the authenticated principal.

Resource routers depend on ``get_current_user`` and hand ``str(user.id)`` to
their application services; services never look the caller up themselves.
"""

import uuid

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from src.fb_common.database import get_db_session
from src.fb_common.errors import AccountDisabledError, InvalidCredentialsError
from src.fb_gateway.auth.jwt_handler import decode_token
from src.fb_gateway.auth.token_denylist import TokenDenylistProtocol, get_token_denylist
from src.fb_gateway.user.db_models import UserModel

# tokenUrl drives the Swagger UI "Authorize" button
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def resolve_principal(
    token: str, db: AsyncSession, denylist: TokenDenylistProtocol
) -> UserModel:
    """401 for a bad, revoked or orphaned token, 403 for a disabled account."""
    try:
        claims = decode_token(token, expected_type="access")
        user_id = uuid.UUID(str(claims["sub"]))
    except (InvalidCredentialsError, ValueError):
        raise _unauthorized() from None
    if await denylist.is_revoked(str(claims.get("jti"))):
        raise _unauthorized()

    user = await db.get(UserModel, user_id)
    if user is None:
        raise _unauthorized()
    if not user.is_active:
        raise AccountDisabledError()
    return user


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db_session),
    denylist: TokenDenylistProtocol = Depends(get_token_denylist),
) -> UserModel:
    return await resolve_principal(token, db, denylist)
