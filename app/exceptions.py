"""
Custom Exception Classes for the Drive service

Every error raised by the item store carries a short human-readable
message, an HTTP status and a machine-readable error code. Internal
identifiers and stack traces never travel inside an exception message.
"""

from enum import Enum
from typing import Any

from fastapi import status


class ErrorCode(str, Enum):
    """Machine-readable error codes returned in the error envelope"""

    AUTH_FAILED = "AUTH_FAILED"
    AUTH_PERMISSION_DENIED = "AUTH_PERMISSION_DENIED"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    VALIDATION_INVALID_EXTENSION = "VALIDATION_INVALID_EXTENSION"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    RESOURCE_ITEM_NOT_FOUND = "RESOURCE_ITEM_NOT_FOUND"
    RESOURCE_PARENT_NOT_FOUND = "RESOURCE_PARENT_NOT_FOUND"
    RESOURCE_USER_NOT_FOUND = "RESOURCE_USER_NOT_FOUND"
    RESOURCE_FILE_NOT_FOUND = "RESOURCE_FILE_NOT_FOUND"
    CONFLICT = "CONFLICT"
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class DriveError(Exception):
    """Base exception class for all Drive errors"""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


# ============================================================================
# Authentication & Authorization Exceptions
# ============================================================================


class AuthenticationError(DriveError):
    """Raised when the bearer token cannot be verified"""

    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code=ErrorCode.AUTH_FAILED,
        )


class UnauthorizedError(DriveError):
    """Raised when the caller lacks the capability required for an action"""

    def __init__(self, message: str = "You do not have permission to access this item"):
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            error_code=ErrorCode.AUTH_PERMISSION_DENIED,
        )


# ============================================================================
# Resource Not Found Exceptions
# ============================================================================


class NotFoundError(DriveError):
    """Base class for resource not found errors"""

    def __init__(self, message: str = "Resource not found", error_code: ErrorCode = ErrorCode.RESOURCE_NOT_FOUND):
        super().__init__(message=message, status_code=status.HTTP_404_NOT_FOUND, error_code=error_code)


class ItemNotFoundError(NotFoundError):
    """Raised when an item is missing or not owned by the caller"""

    def __init__(self, message: str = "Item not found"):
        super().__init__(message=message, error_code=ErrorCode.RESOURCE_ITEM_NOT_FOUND)


class ParentNotFoundError(NotFoundError):
    """Raised when a parent is missing, not a folder, or owned by someone else"""

    def __init__(self, message: str = "Parent folder not found"):
        super().__init__(message=message, error_code=ErrorCode.RESOURCE_PARENT_NOT_FOUND)


class UserNotFoundError(NotFoundError):
    def __init__(self, message: str = "User not found"):
        super().__init__(message=message, error_code=ErrorCode.RESOURCE_USER_NOT_FOUND)


class BinaryFileNotFoundError(NotFoundError):
    def __init__(self, message: str = "File not found"):
        super().__init__(message=message, error_code=ErrorCode.RESOURCE_FILE_NOT_FOUND)


# ============================================================================
# Validation Exceptions
# ============================================================================


class ValidationError(DriveError):
    """Raised when caller input is rejected before any store write"""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        error_code: ErrorCode = ErrorCode.VALIDATION_FAILED,
        details: dict[str, Any] | None = None,
    ):
        error_details = details or {}
        if field:
            error_details["field"] = field
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code=error_code,
            details=error_details,
        )


class InvalidExtensionError(ValidationError):
    """Raised when a file name carries no recognised extension"""

    def __init__(self, name: str, examples: list[str]):
        super().__init__(
            message=f"Invalid file extension. Examples: {', '.join(examples)}...",
            field="name",
            error_code=ErrorCode.VALIDATION_INVALID_EXTENSION,
            details={"name": name},
        )


class PayloadTooLargeError(DriveError):
    def __init__(self, limit_bytes: int):
        super().__init__(
            message=f"File size exceeds maximum allowed size of {limit_bytes // (1024 * 1024)}MB",
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            error_code=ErrorCode.PAYLOAD_TOO_LARGE,
        )


# ============================================================================
# Concurrency & Store Exceptions
# ============================================================================


class ConflictError(DriveError):
    """Raised when a concurrent write wins a race on the same row"""

    def __init__(self, message: str = "The resource was modified concurrently, please retry"):
        super().__init__(message=message, status_code=status.HTTP_409_CONFLICT, error_code=ErrorCode.CONFLICT)


class InternalError(DriveError):
    """Raised when the store is unavailable or a transaction fails"""

    def __init__(self, message: str = "An internal error occurred", operation: str | None = None):
        details = {"operation": operation} if operation else {}
        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code=ErrorCode.INTERNAL_ERROR,
            details=details,
        )
