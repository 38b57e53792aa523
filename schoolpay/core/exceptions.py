"""
Application exceptions and their HTTP error envelope.

Every error raised by the ledger, scope and session layers derives from
AppException so the API can render it with a stable error code.
"""

from typing import Any, Dict, Optional

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from schoolpay.core.logging import get_logger
from schoolpay.schemas.responses import ErrorDetail, ErrorResponse

logger = get_logger(__name__)


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        message: str,
        error_code: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class InvalidInputError(AppException):
    """Rejected request: non-positive amount, bad plan parameters, missing fields."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, error_code: str = "ERR_INVALID_INPUT"):
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details,
        )


class FeeNotPublishedError(InvalidInputError):
    """The institution has no published fee for the requested grade."""

    def __init__(self, school_id: Any, grade: str):
        super().__init__(
            message=f"Fee not published for grade '{grade}'",
            details={"school_id": str(school_id) if school_id else None, "grade": grade},
            error_code="ERR_FEE_NOT_PUBLISHED",
        )


class NotFoundError(AppException):
    """Unknown (or out-of-scope) record."""

    def __init__(self, resource: str, resource_id: Any = None):
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with ID {resource_id} not found"
        super().__init__(
            message=message,
            error_code="ERR_NOT_FOUND",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource": resource, "id": str(resource_id) if resource_id else None},
        )


class IllegalTransitionError(AppException):
    """The requested state change is not allowed from the current state."""

    def __init__(self, message: str, current_state: Any = None, details: Optional[Dict[str, Any]] = None):
        details = dict(details or {})
        if current_state is not None:
            details["current_state"] = getattr(current_state, "value", current_state)
        super().__init__(
            message=message,
            error_code="ERR_ILLEGAL_TRANSITION",
            status_code=status.HTTP_409_CONFLICT,
            details=details,
        )


class PermissionDeniedError(AppException):
    """Raised when the actor's role does not allow the action."""

    def __init__(self, message: str = "Insufficient permissions", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            error_code="ERR_PERMISSION_DENIED",
            status_code=status.HTTP_403_FORBIDDEN,
            details=details,
        )


class AuthenticationError(AppException):
    """Raised for authentication failures."""

    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(
            message=message,
            error_code="ERR_AUTH",
            status_code=status.HTTP_401_UNAUTHORIZED,
        )


class CascadeDeleteError(AppException):
    """Dependent records survived a cascade delete; re-query before assuming success."""

    def __init__(self, root: str, root_id: Any, remaining: Dict[str, int]):
        super().__init__(
            message=f"Cascade delete of {root} {root_id} left dependent records",
            error_code="ERR_CASCADE_INCOMPLETE",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details={"root": root, "id": str(root_id), "remaining": remaining},
        )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Render AppException in the standard error envelope."""
    log = logger.error if exc.status_code >= 500 else logger.info
    log(
        exc.message,
        extra={
            "error_code": exc.error_code,
            "path": request.url.path,
            "correlation_id": getattr(request.state, "request_id", None),
        },
    )
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(ErrorResponse(
            error=ErrorDetail(code=exc.error_code, message=exc.message),
            details=exc.details,
        )),
        headers=headers,
    )
