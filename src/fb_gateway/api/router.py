"""Auth endpoints. register/login/refresh are public; the rest need a token.

POST /auth/register  — 201, new account
POST /auth/login     — access + refresh token pair
POST /auth/refresh   — new access token
POST /auth/logout    — revoke the access token (and an optional refresh token)
GET  /auth/profile   — the authenticated account
GET  /auth/user      — same payload as /auth/profile
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.fb_common.database import get_db_session
from src.fb_common.response import ApiResponse, success_response
from src.fb_gateway.auth.dependencies import get_current_user, oauth2_scheme
from src.fb_gateway.auth.token_denylist import TokenDenylistProtocol, get_token_denylist
from src.fb_gateway.user.db_models import UserModel
from src.fb_gateway.user.schemas import (
    LoginRequest,
    LoginResponse,
    LogoutRequest,
    RefreshRequest,
    RefreshResponse,
    RegisterRequest,
    UserInfo,
)
from src.fb_gateway.user.service import UserService

router = APIRouter(prefix="/auth", tags=["auth"])

_service = UserService()


def get_user_service() -> UserService:
    return _service


Service = Annotated[UserService, Depends(get_user_service)]
CurrentUser = Annotated[UserModel, Depends(get_current_user)]
Db = Annotated[AsyncSession, Depends(get_db_session)]
Denylist = Annotated[TokenDenylistProtocol, Depends(get_token_denylist)]
BearerToken = Annotated[str, Depends(oauth2_scheme)]

_ACCESS_TTL_SECONDS = settings.JWT_EXPIRE_MINUTES * 60


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterRequest, request: Request, db: Db, service: Service
) -> ApiResponse:
    async with db.begin():
        user = await service.register(body.username, body.email, body.password, db)
    return success_response(
        UserInfo.from_model(user).model_dump(),
        message="User registered successfully",
        request=request,
    )


@router.post("/login")
async def login(body: LoginRequest, request: Request, db: Db, service: Service) -> ApiResponse:
    user, tokens = await service.login(body.username, body.password, db)
    data = LoginResponse(
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        expires_in=_ACCESS_TTL_SECONDS,
        user=UserInfo.from_model(user),
    )
    return success_response(data.model_dump(), message="Login successful", request=request)


@router.post("/refresh")
async def refresh(
    body: RefreshRequest, request: Request, service: Service, denylist: Denylist
) -> ApiResponse:
    access_token = await service.refresh(body.refresh_token, denylist)
    data = RefreshResponse(access_token=access_token, expires_in=_ACCESS_TTL_SECONDS)
    return success_response(data.model_dump(), message="Token refreshed", request=request)


@router.post("/logout")
async def logout(
    request: Request,
    token: BearerToken,
    current_user: CurrentUser,
    service: Service,
    denylist: Denylist,
    body: LogoutRequest | None = None,
) -> ApiResponse:
    refresh_token = body.refresh_token if body else None
    await service.logout(token, refresh_token, denylist)
    return success_response(message="Successfully logged out", request=request)


@router.get("/profile")
@router.get("/user")
async def profile(request: Request, current_user: CurrentUser) -> ApiResponse:
    return success_response(UserInfo.from_model(current_user).model_dump(), request=request)
