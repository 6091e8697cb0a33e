"""fb_expense REST endpoints — JWT required, scoped to the caller.

GET    /expenses          — caller's expenses
POST   /expenses          — create (201)
GET    /expenses/{id}
PUT    /expenses/{id}     — partial update of the fields present in the body
DELETE /expenses/{id}
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.fb_common.database import get_db_session
from src.fb_common.response import ApiResponse, success_response
from src.fb_expense.application.schemas import ExpenseCreateRequest, ExpenseUpdateRequest
from src.fb_expense.application.service import ExpenseApplicationService
from src.fb_gateway.auth.dependencies import get_current_user
from src.fb_gateway.user.db_models import UserModel

router = APIRouter(prefix="/expenses", tags=["expenses"])

_service = ExpenseApplicationService()


def get_expense_service() -> ExpenseApplicationService:
    return _service


Service = Annotated[ExpenseApplicationService, Depends(get_expense_service)]
CurrentUser = Annotated[UserModel, Depends(get_current_user)]
Db = Annotated[AsyncSession, Depends(get_db_session)]


@router.get("")
async def list_expenses(
    request: Request, current_user: CurrentUser, db: Db, service: Service
) -> ApiResponse:
    items = await service.list_expenses(db, str(current_user.id))
    return success_response([e.model_dump(mode="json") for e in items], request=request)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_expense(
    body: ExpenseCreateRequest,
    request: Request,
    current_user: CurrentUser,
    db: Db,
    service: Service,
) -> ApiResponse:
    result = await service.create_expense(
        db,
        str(current_user.id),
        body.category_id,
        body.title,
        body.amount,
        body.date,
    )
    return success_response(result.model_dump(mode="json"), request=request)


@router.get("/{expense_id}")
async def get_expense(
    expense_id: int,
    request: Request,
    current_user: CurrentUser,
    db: Db,
    service: Service,
) -> ApiResponse:
    result = await service.get_expense(db, str(current_user.id), expense_id)
    return success_response(result.model_dump(mode="json"), request=request)


@router.put("/{expense_id}")
async def update_expense(
    expense_id: int,
    body: ExpenseUpdateRequest,
    request: Request,
    current_user: CurrentUser,
    db: Db,
    service: Service,
) -> ApiResponse:
    # exclude_unset: an explicit null clears category_id, an absent key leaves it alone
    fields = body.model_dump(exclude_unset=True)
    result = await service.update_expense(db, str(current_user.id), expense_id, fields)
    return success_response(result.model_dump(mode="json"), request=request)


@router.delete("/{expense_id}")
async def delete_expense(
    expense_id: int,
    request: Request,
    current_user: CurrentUser,
    db: Db,
    service: Service,
) -> ApiResponse:
    await service.delete_expense(db, str(current_user.id), expense_id)
    return success_response(message="Expense deleted successfully", request=request)
