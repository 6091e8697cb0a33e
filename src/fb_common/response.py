"""Unified API response envelope.

Every endpoint, success or error, returns:
{
    "code": 0,              // 0 = success, otherwise an AppError code
    "message": "success",   // delete confirmations and error text live here
    "data": { ... },        // object/list on success; null or {"errors": ...} on error
    "timestamp": "...",
    "request_id": "..."     // matches the X-Request-ID response header
}
"""

import uuid
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field
from starlette.requests import Request


def new_request_id() -> str:
    return f"req_{uuid.uuid4().hex[:12]}"


def request_id_of(request: Request | None) -> str:
    """The id RequestLogMiddleware stored on the request, or a fresh one."""
    if request is not None:
        request_id = getattr(request.state, "request_id", None)
        if request_id:
            return request_id
    return new_request_id()


class ApiResponse(BaseModel):
    code: int = 0
    message: str = "success"
    data: Any = None
    timestamp: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    request_id: str = Field(default_factory=new_request_id)


def success_response(
    data: Any = None, message: str = "success", request: Request | None = None
) -> ApiResponse:
    return ApiResponse(code=0, message=message, data=data, request_id=request_id_of(request))


def error_response(
    code: int, message: str, data: Any = None, request: Request | None = None
) -> ApiResponse:
    return ApiResponse(code=code, message=message, data=data, request_id=request_id_of(request))
