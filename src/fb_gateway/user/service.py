"""Account service: register, login, refresh, logout.

``register`` runs inside the caller's transaction (``async with db.begin()``
in the router); login and refresh only read the database. Logout and refresh
talk to the token denylist, never to the database.
"""

import logging

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.fb_common.errors import (
    AccountDisabledError,
    EmailExistsError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    UsernameExistsError,
)
from src.fb_gateway.auth.jwt_handler import (
    TokenPair,
    create_access_token,
    decode_token,
    issue_token_pair,
)
from src.fb_gateway.auth.password import hash_password, verify_password
from src.fb_gateway.auth.token_denylist import TokenDenylistProtocol
from src.fb_gateway.user.db_models import UserModel

logger = logging.getLogger(__name__)


class UserService:
    async def register(
        self,
        username: str,
        email: str,
        password: str,
        db: AsyncSession,
    ) -> UserModel:
        result = await db.execute(
            select(UserModel.username, UserModel.email).where(
                or_(UserModel.username == username, UserModel.email == email)
            )
        )
        clashes = result.all()
        if any(row.username == username for row in clashes):
            raise UsernameExistsError()
        if clashes:
            raise EmailExistsError()

        user = UserModel(
            username=username,
            email=email,
            password_hash=hash_password(password),
            is_active=True,
        )
        db.add(user)
        try:
            await db.flush()
        except IntegrityError as exc:
            # concurrent registration won the unique constraint
            if "email" in str(exc.orig):
                raise EmailExistsError() from exc
            raise UsernameExistsError() from exc
        await db.refresh(user)
        logger.info("User registered: id=%s username=%s", user.id, username)
        return user

    async def login(
        self,
        username: str,
        password: str,
        db: AsyncSession,
    ) -> tuple[UserModel, TokenPair]:
        """Unknown user and wrong password fail identically (no enumeration)."""
        result = await db.execute(select(UserModel).where(UserModel.username == username))
        user = result.scalar_one_or_none()

        if user is None or not verify_password(password, user.password_hash):
            logger.info("Login rejected: username=%s", username)
            raise InvalidCredentialsError()
        if not user.is_active:
            raise AccountDisabledError()

        return user, issue_token_pair(str(user.id))

    async def refresh(self, refresh_token: str, denylist: TokenDenylistProtocol) -> str:
        """New access token for a valid refresh token; the refresh token is not rotated."""
        claims = decode_token(refresh_token, expected_type="refresh")
        if await denylist.is_revoked(str(claims.get("jti"))):
            raise InvalidRefreshTokenError()
        return create_access_token(str(claims["sub"]))

    async def logout(
        self,
        access_token: str,
        refresh_token: str | None,
        denylist: TokenDenylistProtocol,
    ) -> None:
        """Revoke the presented access token and, when given, the caller's refresh token.

        A refresh token that does not verify, or belongs to another subject,
        fails with InvalidRefreshTokenError before anything is revoked.
        """
        access = decode_token(access_token, expected_type="access")
        revoked = [access]
        if refresh_token is not None:
            refresh = decode_token(refresh_token, expected_type="refresh")
            if refresh["sub"] != access["sub"]:
                raise InvalidRefreshTokenError()
            revoked.append(refresh)

        for claims in revoked:
            await denylist.revoke(str(claims["jti"]), int(claims["exp"]))
        logger.info("User logged out: id=%s tokens=%d", access["sub"], len(revoked))
