"""fb_budget REST endpoints — all require JWT authentication.

GET    /budgets          — caller's budgets
POST   /budgets          — create (201)
GET    /budgets/{id}     — owner only
PUT    /budgets/{id}     — owner only, body validated after the ownership check
DELETE /budgets/{id}     — owner only
"""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.fb_budget.application.schemas import BudgetRequest
from src.fb_budget.application.service import BudgetApplicationService
from src.fb_common.database import get_db_session
from src.fb_common.response import ApiResponse, success_response
from src.fb_gateway.auth.dependencies import get_current_user
from src.fb_gateway.user.db_models import UserModel

router = APIRouter(prefix="/budgets", tags=["budgets"])

_service = BudgetApplicationService()


def get_budget_service() -> BudgetApplicationService:
    return _service


Service = Annotated[BudgetApplicationService, Depends(get_budget_service)]
CurrentUser = Annotated[UserModel, Depends(get_current_user)]
Db = Annotated[AsyncSession, Depends(get_db_session)]


@router.get("")
async def list_budgets(
    request: Request, current_user: CurrentUser, db: Db, service: Service
) -> ApiResponse:
    items = await service.list_budgets(db, str(current_user.id))
    return success_response([b.model_dump(mode="json") for b in items], request=request)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_budget(
    body: BudgetRequest,
    request: Request,
    current_user: CurrentUser,
    db: Db,
    service: Service,
) -> ApiResponse:
    result = await service.create_budget(db, str(current_user.id), body.limit)
    return success_response(result.model_dump(mode="json"), request=request)


@router.get("/{budget_id}")
async def get_budget(
    budget_id: int,
    request: Request,
    current_user: CurrentUser,
    db: Db,
    service: Service,
) -> ApiResponse:
    result = await service.get_budget(db, str(current_user.id), budget_id)
    return success_response(result.model_dump(mode="json"), request=request)


@router.put("/{budget_id}")
async def update_budget(
    budget_id: int,
    request: Request,
    current_user: CurrentUser,
    db: Db,
    service: Service,
    body: Annotated[Any, Body()] = None,
) -> ApiResponse:
    result = await service.update_budget(db, str(current_user.id), budget_id, body)
    return success_response(result.model_dump(mode="json"), request=request)


@router.delete("/{budget_id}")
async def delete_budget(
    budget_id: int,
    request: Request,
    current_user: CurrentUser,
    db: Db,
    service: Service,
) -> ApiResponse:
    await service.delete_budget(db, str(current_user.id), budget_id)
    return success_response(message="Budget deleted successfully", request=request)
