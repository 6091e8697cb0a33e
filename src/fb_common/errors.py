"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/User
  2xxx: Budget
  3xxx: Category
  4xxx: Expense
  9xxx: System (9004 wraps framework HTTP errors)
"""

from collections.abc import Iterable, Mapping
from typing import Any


class AppError(Exception):
    """Base application error.

    ``details`` is rendered into the ``data`` field of the error envelope,
    e.g. field-level validation messages.
    """

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        self.details = details
        super().__init__(message)


class FieldValidationError(AppError):
    """422 carrying Laravel-style ``{"errors": {field: [messages]}}`` details."""

    def __init__(self, code: int, field: str, message: str) -> None:
        super().__init__(code, message, 422, {"errors": {field: [message]}})


# --- 1xxx: Auth/User ---

class UsernameExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Username already exists", 409)


class EmailExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1002, "Email already exists", 409)


class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid username or password", 401)


class AccountDisabledError(AppError):
    def __init__(self) -> None:
        super().__init__(1004, "Account is disabled", 403)


class InvalidRefreshTokenError(AppError):
    def __init__(self) -> None:
        super().__init__(1005, "Refresh token is invalid or expired", 401)


# --- 2xxx: Budget ---

class BudgetNotFoundError(AppError):
    def __init__(self, budget_id: int) -> None:
        super().__init__(2001, f"Budget not found: {budget_id}", 404)


class BudgetAccessDeniedError(AppError):
    def __init__(self) -> None:
        super().__init__(2002, "This action is unauthorized.", 403)


# --- 3xxx: Category ---

class CategoryNotFoundError(AppError):
    def __init__(self, category_id: int) -> None:
        super().__init__(3001, f"Category not found: {category_id}", 404)


class CategoryNameTakenError(FieldValidationError):
    def __init__(self) -> None:
        super().__init__(3002, "name", "The name has already been taken.")


# --- 4xxx: Expense ---

class ExpenseNotFoundError(AppError):
    def __init__(self, expense_id: int) -> None:
        super().__init__(4001, f"Expense not found: {expense_id}", 404)


class CategoryReferenceError(FieldValidationError):
    def __init__(self) -> None:
        super().__init__(4002, "category_id", "The selected category id is invalid.")


# --- 9xxx: System ---

class RateLimitError(AppError):
    def __init__(self, retry_after: int = 60) -> None:
        super().__init__(9001, "Too many requests. Please try again later.", 429)
        self.retry_after = retry_after


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class RequestValidationFailedError(AppError):
    def __init__(self, errors: dict[str, list[str]]) -> None:
        super().__init__(9003, "The given data was invalid.", 422, {"errors": errors})

    @classmethod
    def from_pydantic(
        cls, errors: Iterable[Mapping[str, Any]]
    ) -> "RequestValidationFailedError":
        """Flatten Pydantic errors into {field: [messages]}."""
        flat: dict[str, list[str]] = {}
        for err in errors:
            loc = [str(part) for part in err.get("loc", ()) if part != "body"]
            field = ".".join(loc) or "body"
            flat.setdefault(field, []).append(str(err.get("msg", "Invalid value")))
        return cls(flat)


class HttpError(AppError):
    """Starlette/FastAPI ``HTTPException`` re-raised in envelope form.

    A 401 keeps the invalid-credentials code; unknown routes, wrong methods and
    the like share 9004.
    """

    def __init__(
        self, http_status: int, message: str, headers: Mapping[str, str] | None = None
    ) -> None:
        code = 1003 if http_status == 401 else 9004
        super().__init__(code, message, http_status)
        self.headers = dict(headers or {})
