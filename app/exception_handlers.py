"""
Global Exception Handlers for the Drive service

Every error leaves the service in the same envelope:
{
    "error": {
        "status_code": 404,
        "error_code": "RESOURCE_ITEM_NOT_FOUND",
        "message": "Item not found",
        "type": "Not Found",
        "details": {...},
        "path": "/api/v1/items/12",
        "request_id": "..."
    }
}
"""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.exceptions import DriveError, ErrorCode, InternalError
from app.middleware.logging import get_request_id

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."

ERROR_TYPES = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    409: "Conflict",
    413: "Payload Too Large",
    422: "Validation Error",
    500: "Internal Server Error",
}

# Codes for errors raised by FastAPI/Starlette itself rather than by a DriveError
HTTP_ERROR_CODES = {
    400: ErrorCode.VALIDATION_FAILED,
    401: ErrorCode.AUTH_FAILED,
    403: ErrorCode.AUTH_PERMISSION_DENIED,
    404: ErrorCode.RESOURCE_NOT_FOUND,
    409: ErrorCode.CONFLICT,
    413: ErrorCode.PAYLOAD_TOO_LARGE,
    422: ErrorCode.VALIDATION_FAILED,
    500: ErrorCode.INTERNAL_ERROR,
}


def get_error_type(status_code: int) -> str:
    return ERROR_TYPES.get(status_code, "Error")


def create_error_response(
    status_code: int,
    message: str,
    error_code: str | ErrorCode | None = None,
    details: dict[str, Any] | None = None,
    path: str | None = None,
) -> JSONResponse:
    """Build the error envelope; optional keys are left out when empty."""
    body: dict[str, Any] = {
        "status_code": status_code,
        "message": message,
        "type": get_error_type(status_code),
    }
    if error_code:
        body["error_code"] = ErrorCode(error_code).value
    if details:
        body["details"] = details
    if path:
        body["path"] = path
    request_id = get_request_id()
    if request_id:
        body["request_id"] = request_id

    return JSONResponse(status_code=status_code, content={"error": body})


async def drive_exception_handler(request: Request, exc: DriveError) -> JSONResponse:
    """
    Caller errors are returned as raised. InternalError is logged with the
    store failure that caused it and answered with a generic message.
    """
    path = request.url.path
    if isinstance(exc, InternalError):
        logger.error(
            "%s failed: %s",
            exc.details.get("operation", "request"),
            exc.message,
            exc_info=exc.__cause__ or exc,
            extra={"path": path, "status_code": exc.status_code},
        )
        return create_error_response(exc.status_code, GENERIC_ERROR_MESSAGE, exc.error_code, path=path)

    logger.warning("%s: %s", type(exc).__name__, exc.message, extra={"path": path, "status_code": exc.status_code})
    return create_error_response(exc.status_code, exc.message, exc.error_code, exc.details, path)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    logger.warning("HTTPException %s: %s", exc.status_code, exc.detail, extra={"path": request.url.path})
    error_code = HTTP_ERROR_CODES.get(exc.status_code, ErrorCode.UNKNOWN_ERROR)
    return create_error_response(exc.status_code, str(exc.detail), error_code, path=request.url.path)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {
            "field": ".".join(str(part) for part in error["loc"] if part != "body"),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    logger.warning("Rejected request body on %s (%d errors)", request.url.path, len(errors))
    return create_error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Validation error",
        ErrorCode.VALIDATION_FAILED,
        {"validation_errors": errors},
        request.url.path,
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled exception: %s",
        exc,
        exc_info=True,
        extra={"path": request.url.path, "method": request.method},
    )
    return create_error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        GENERIC_ERROR_MESSAGE,
        ErrorCode.INTERNAL_ERROR,
        path=request.url.path,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DriveError, drive_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
    logger.debug("Exception handlers registered")
