"""File storage exception classes and handlers."""

from typing import Any

from fastapi import Request, status
from fastapi.responses import JSONResponse


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.detail = detail or {}
        super().__init__(self.message)


class InvalidInputError(AppException):
    """Caller-supplied data is missing or malformed."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"field": field} if field else None,
        )
        self.field = field


class NotFoundError(AppException):
    """Stored object is absent or has an empty body."""

    def __init__(
        self,
        resource: str,
        identifier: str | None = None,
    ) -> None:
        message = f"{resource} not found"
        if identifier:
            message = f"{resource} {identifier} not found or empty"
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
        )
        self.identifier = identifier


class UnexpectedStateError(AppException):
    """Wrapped failure from the object-store client (network, signing, ...)."""

    def __init__(
        self,
        message: str,
        detail: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
        )


async def app_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle AppException and return JSON response."""
    if isinstance(exc, AppException):
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": exc.message,
                "detail": exc.detail,
            },
        )
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "detail": {}},
    )
