"""
Central error handling for the Barangay Services Backend

Domain errors are HTTPException subclasses carrying a stable ``code`` so that
clients can tell INVALID_CREDENTIALS from RATE_LIMITED without parsing text.
"""
import logging
import traceback
from typing import Any, Dict, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi import HTTPException

logger = logging.getLogger(__name__)


class AppError(HTTPException):
    """Base class for errors raised by services"""

    code = "ERROR"
    status_code_default = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        detail: str,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        field: Optional[str] = None,
    ):
        super().__init__(status_code=status_code or self.status_code_default, detail=detail)
        if code is not None:
            self.code = code
        self.field = field


class InvalidCredentialsError(AppError):
    code = "INVALID_CREDENTIALS"
    status_code_default = status.HTTP_401_UNAUTHORIZED

    def __init__(self, detail: str = "Invalid username or password"):
        super().__init__(detail)


class AccountInactiveError(AppError):
    code = "ACCOUNT_INACTIVE"
    status_code_default = status.HTTP_403_FORBIDDEN

    def __init__(self, detail: str = "Account is deactivated"):
        super().__init__(detail)


class RateLimitedError(AppError):
    code = "RATE_LIMITED"
    status_code_default = status.HTTP_429_TOO_MANY_REQUESTS

    def __init__(self, detail: str = "Too many failed login attempts. Please try again later."):
        super().__init__(detail)


class SessionInvalidError(AppError):
    code = "SESSION_INVALID"
    status_code_default = status.HTTP_401_UNAUTHORIZED

    def __init__(self, detail: str = "Invalid or expired session"):
        super().__init__(detail)


class PermissionDeniedError(AppError):
    code = "FORBIDDEN"
    status_code_default = status.HTTP_403_FORBIDDEN


class NotFoundError(AppError):
    code = "NOT_FOUND"
    status_code_default = status.HTTP_404_NOT_FOUND


class FieldValidationError(AppError):
    """A submitted value failed a business rule; ``field`` names the offender"""

    code = "VALIDATION_ERROR"
    status_code_default = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, field: str, detail: str):
        super().__init__(detail, field=field)


class InvalidTransitionError(AppError):
    code = "INVALID_TRANSITION"
    status_code_default = status.HTTP_409_CONFLICT

    def __init__(self, current: str, target: str):
        super().__init__(f"Cannot change status from '{current}' to '{target}'")
        self.current = current
        self.target = target


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """
    Handle HTTPException with consistent JSON response format

    Args:
        request: FastAPI request object
        exc: HTTPException instance

    Returns:
        JSONResponse with error details
    """
    content: Dict[str, Any] = {
        "error": True,
        "status_code": exc.status_code,
        "detail": exc.detail,
        "path": str(request.url.path)
    }
    if isinstance(exc, AppError):
        content["code"] = exc.code
        if exc.field:
            content["field"] = exc.field
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Handle RequestValidationError with consistent JSON response format

    Does not leak internal validation details in production.
    """
    from app.core.config import settings

    if settings.APP_ENV == "prod":
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error": True,
                "status_code": 422,
                "code": "VALIDATION_ERROR",
                "detail": "Validation error: Invalid request data",
                "path": str(request.url.path)
            }
        )

    # ctx.error may hold a ValueError instance, which is not JSON serialisable
    errors = []
    for e in exc.errors():
        err = dict(e)
        if "ctx" in err and isinstance(err["ctx"], dict):
            err["ctx"] = {
                k: (str(v) if not isinstance(v, (str, int, float, bool, type(None))) else v)
                for k, v in err["ctx"].items()
            }
        errors.append(err)
    field = None
    if errors and errors[0].get("loc"):
        field = str(errors[0]["loc"][-1])
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": True,
            "status_code": 422,
            "code": "VALIDATION_ERROR",
            "detail": "Validation error",
            "field": field,
            "errors": errors,
            "path": str(request.url.path)
        }
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions with consistent JSON response format

    Does not leak internal error details in production.
    """
    from app.core.config import settings

    logger.error(f"Unhandled exception: {exc}", exc_info=True)

    if settings.APP_ENV == "prod":
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": True,
                "status_code": 500,
                "detail": "Internal server error",
                "path": str(request.url.path)
            }
        )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": True,
            "status_code": 500,
            "detail": str(exc),
            "path": str(request.url.path),
            "traceback": traceback.format_exc() if settings.APP_ENV == "local" else None
        }
    )
