"""
Central error handling for Leave Tracker
"""
import logging
import traceback

from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi import HTTPException

from leave_tracker.core.exceptions import (
    LeaveError,
    LeaveNotFound,
    ManagerNotFound,
    InsufficientBalance,
    LeaveValidationError,
    LeaveConflict,
)

logger = logging.getLogger(__name__)

# Unknown managers and malformed leaves are 400, balance failures are 424 (FAILED_DEPENDENCY).
LEAVE_ERROR_STATUS = {
    LeaveNotFound: status.HTTP_404_NOT_FOUND,
    ManagerNotFound: status.HTTP_400_BAD_REQUEST,
    InsufficientBalance: status.HTTP_424_FAILED_DEPENDENCY,
    LeaveValidationError: status.HTTP_400_BAD_REQUEST,
    LeaveConflict: status.HTTP_409_CONFLICT,
}


def status_for_leave_error(exc: LeaveError) -> int:
    """Resolve the HTTP status for a domain error (most specific class wins)"""
    for klass in type(exc).__mro__:
        if klass in LEAVE_ERROR_STATUS:
            return LEAVE_ERROR_STATUS[klass]
    return status.HTTP_400_BAD_REQUEST


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """
    Handle HTTPException with consistent JSON response format

    Args:
        request: FastAPI request object
        exc: HTTPException instance

    Returns:
        JSONResponse with error details
    """
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": True,
            "status_code": exc.status_code,
            "detail": exc.detail,
            "path": str(request.url.path)
        },
        headers=getattr(exc, "headers", None),
    )


async def leave_exception_handler(request: Request, exc: LeaveError) -> JSONResponse:
    """
    Handle leave-domain errors raised by the service layer

    Args:
        request: FastAPI request object
        exc: LeaveError instance

    Returns:
        JSONResponse with error code and details
    """
    status_code = status_for_leave_error(exc)
    logger.info(
        "leave request failed: path=%s error=%s status=%s",
        request.url.path, exc.error_code, status_code,
    )
    return JSONResponse(
        status_code=status_code,
        content={
            "error": True,
            "status_code": status_code,
            "error_code": exc.error_code,
            "detail": exc.message,
            "details": exc.details,
            "path": str(request.url.path)
        }
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Handle RequestValidationError with consistent JSON response format

    Does not leak internal validation details in production.
    """
    from leave_tracker.core.config import settings

    if settings.APP_ENV == "prod":
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error": True,
                "status_code": 422,
                "detail": "Validation error: Invalid request data",
                "path": str(request.url.path)
            }
        )

    # ctx may carry exception instances, which are not JSON serializable
    errors = []
    for e in exc.errors():
        err = dict(e)
        if "ctx" in err and isinstance(err["ctx"], dict):
            err["ctx"] = {
                k: (str(v) if not isinstance(v, (str, int, float, bool, type(None))) else v)
                for k, v in err["ctx"].items()
            }
        errors.append(err)
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": True,
            "status_code": 422,
            "detail": "Validation error",
            "errors": errors,
            "path": str(request.url.path)
        }
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions with consistent JSON response format

    Does not leak internal error details in production.
    """
    from leave_tracker.core.config import settings

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
