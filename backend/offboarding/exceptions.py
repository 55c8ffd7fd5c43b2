from __future__ import annotations

import uuid

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    error: str
    detail: str | None = None
    status_code: int
    errors: list[str] | None = None


class AppError(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class NotFoundError(AppError):
    """A referenced exit request, clearance item or calculation does not exist."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=status.HTTP_404_NOT_FOUND)


class ForbiddenError(AppError):
    """The caller's role does not permit the action."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=status.HTTP_403_FORBIDDEN)


class InvalidTransitionError(AppError):
    """The requested status is not a legal successor of the current one."""

    def __init__(self, current_status: str, target_status: str, reason: str | None = None) -> None:
        self.current_status = current_status
        self.target_status = target_status
        message = f"Cannot move exit request from '{current_status}' to '{target_status}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, status_code=status.HTTP_409_CONFLICT)


class DuplicateActiveRequestError(AppError):
    """The employee already has an exit request that is neither completed nor cancelled."""

    def __init__(self, employee_id: uuid.UUID, existing_request_id: uuid.UUID) -> None:
        self.employee_id = employee_id
        self.existing_request_id = existing_request_id
        super().__init__(
            f"Employee already has an active exit request ({existing_request_id})",
            status_code=status.HTTP_409_CONFLICT,
        )


class ExitRequestClosedError(AppError):
    """The exit request is completed or cancelled, so its records are frozen."""

    def __init__(self, current_status: str) -> None:
        self.current_status = current_status
        super().__init__(
            f"Exit request is {current_status}; its records can no longer change",
            status_code=status.HTTP_409_CONFLICT,
        )


class SettlementValidationError(AppError):
    """Settlement inputs are incomplete. Carries every problem found, not just the first."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__("Invalid settlement inputs", status_code=status.HTTP_422_UNPROCESSABLE_ENTITY)


async def _app_exception_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=type(exc).__name__,
            detail=exc.message,
            status_code=exc.status_code,
            errors=getattr(exc, "errors", None),
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
