from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    error: str
    detail: str | None = None
    status_code: int


class AppError(Exception):
    """Base application exception."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


# ---------------------------------------------------------------------------
# Leave ledger error taxonomy
# ---------------------------------------------------------------------------


class NotFound(AppError):
    """The referenced entity does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class InvalidTransition(AppError):
    """The requested status change is not allowed from the current status."""

    status_code = status.HTTP_409_CONFLICT


class UnknownLeaveType(AppError):
    """The employee has no balance record for the leave type."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class MissingReason(AppError):
    """A rejection or cancellation was attempted without a reason."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class NotApproved(AppError):
    """Only approved requests can be cancelled."""

    status_code = status.HTTP_409_CONFLICT


class BalanceInconsistency(AppError):
    """Stored balance state contradicts the request being reversed.

    Signals upstream data corruption rather than a user error.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class InsufficientBalance(AppError):
    """The balance change would leave available days below zero."""

    status_code = status.HTTP_409_CONFLICT


class InvalidDateRange(AppError):
    """The request period is empty or reversed."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class InvalidBatch(AppError):
    """A bulk action was called with no request ids or too many."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class InvalidRoster(AppError):
    """Coverage was requested for a team with no members."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN


class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT


async def _app_exception_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=type(exc).__name__,
            detail=exc.message,
            status_code=exc.status_code,
        ).model_dump(),
    )


async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ErrorResponse(
            error="ValidationError",
            detail=str(exc.errors()),
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        ).model_dump(),
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers on the application."""
    app.add_exception_handler(AppError, _app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)  # type: ignore[arg-type]
