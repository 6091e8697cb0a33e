"""fb_category REST endpoints — JWT required, no ownership scoping.

GET    /categories          — cached list
POST   /categories          — create (201), unique name
GET    /categories/{id}     — cached item
PUT    /categories/{id}     — rename, unique name excluding itself
DELETE /categories/{id}
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.fb_category.application.schemas import CategoryRequest
from src.fb_category.application.service import CategoryApplicationService
from src.fb_common.cache import CacheProtocol, get_category_cache
from src.fb_common.database import get_db_session
from src.fb_common.response import ApiResponse, success_response
from src.fb_gateway.auth.dependencies import get_current_user
from src.fb_gateway.user.db_models import UserModel

router = APIRouter(prefix="/categories", tags=["categories"])


async def get_category_service(
    cache: Annotated[CacheProtocol, Depends(get_category_cache)],
) -> CategoryApplicationService:
    return CategoryApplicationService(cache)


Service = Annotated[CategoryApplicationService, Depends(get_category_service)]
CurrentUser = Annotated[UserModel, Depends(get_current_user)]
Db = Annotated[AsyncSession, Depends(get_db_session)]


@router.get("")
async def list_categories(
    request: Request, current_user: CurrentUser, db: Db, service: Service
) -> ApiResponse:
    items = await service.list_categories(db)
    return success_response([c.model_dump(mode="json") for c in items], request=request)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_category(
    body: CategoryRequest,
    request: Request,
    current_user: CurrentUser,
    db: Db,
    service: Service,
) -> ApiResponse:
    result = await service.create_category(db, body.name)
    return success_response(result.model_dump(mode="json"), request=request)


@router.get("/{category_id}")
async def get_category(
    category_id: int,
    request: Request,
    current_user: CurrentUser,
    db: Db,
    service: Service,
) -> ApiResponse:
    result = await service.get_category(db, category_id)
    return success_response(result.model_dump(mode="json"), request=request)


@router.put("/{category_id}")
async def update_category(
    category_id: int,
    body: CategoryRequest,
    request: Request,
    current_user: CurrentUser,
    db: Db,
    service: Service,
) -> ApiResponse:
    result = await service.update_category(db, category_id, body.name)
    return success_response(result.model_dump(mode="json"), request=request)


@router.delete("/{category_id}")
async def delete_category(
    category_id: int,
    request: Request,
    current_user: CurrentUser,
    db: Db,
    service: Service,
) -> ApiResponse:
    await service.delete_category(db, category_id)
    return success_response(message="Category deleted successfully", request=request)
