"""
Cachefront - Core Error Types

Defines the exception hierarchy raised by cache drivers and the facade.
All exceptions inherit from CachefrontError for consistent error handling.

Driver errors are unified under CacheError:
- CacheConnectionError: backend connectivity / I/O failure (never retried)
- CacheWriteConflictError: a concurrent write to the same key won a race
- CacheSerializationError: value could not be encoded or decoded
- CacheDataFormatError: stored item does not have the expected shape
- UnsupportedOperationError: backend has no primitive for the operation
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Standard error codes for structured error reporting."""

    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    CACHE_FAILURE = "CACHE_FAILURE"
    CACHE_CONNECTION = "CACHE_CONNECTION"
    CACHE_SERIALIZATION = "CACHE_SERIALIZATION"
    CACHE_DATA_FORMAT = "CACHE_DATA_FORMAT"
    CACHE_WRITE_CONFLICT = "CACHE_WRITE_CONFLICT"
    UNSUPPORTED_OPERATION = "UNSUPPORTED_OPERATION"

    INTERNAL_ERROR = "INTERNAL_ERROR"


class CachefrontError(Exception):
    """Base exception for all Cachefront errors."""

    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for structured logging or responses."""
        return {
            "error": self.__class__.__name__,
            "error_code": self.error_code.value,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(CachefrontError):
    """Raised when configuration is invalid or a backend cannot be built."""

    error_code = ErrorCode.CONFIGURATION_ERROR


class CacheError(CachefrontError):
    """Base exception for driver errors."""

    error_code = ErrorCode.CACHE_FAILURE


class CacheConnectionError(CacheError):
    """Raised when the cache backend cannot be reached or an I/O call fails."""

    error_code = ErrorCode.CACHE_CONNECTION

    def __init__(self, backend: str, operation: str, details: dict[str, Any] | None = None):
        message = f"Cache backend '{backend}' failed during {operation}"
        error_details = {"backend": backend, "operation": operation}
        error_details.update(details or {})
        super().__init__(message, error_details)
        self.backend = backend
        self.operation = operation


class CacheWriteConflictError(CacheError):
    """
    Raised when a concurrent write to the same key wins a race.

    The backend is healthy; the write was rejected because another writer
    inserted the key first (for example the table driver's delete-then-insert
    colliding on the primary key). Callers may retry or ignore it.
    """

    error_code = ErrorCode.CACHE_WRITE_CONFLICT

    def __init__(self, backend: str, key: str, details: dict[str, Any] | None = None):
        message = f"Concurrent write to key '{key}' on cache backend '{backend}'"
        error_details = {"backend": backend, "key": key}
        error_details.update(details or {})
        super().__init__(message, error_details)
        self.backend = backend
        self.key = key


class CacheSerializationError(CacheError):
    """Raised when a value cannot be encoded for storage or decoded on read."""

    error_code = ErrorCode.CACHE_SERIALIZATION


class CacheDataFormatError(CacheError):
    """Raised when a stored item does not match the backend's expected attribute shape."""

    error_code = ErrorCode.CACHE_DATA_FORMAT


class UnsupportedOperationError(CacheError):
    """Raised when the backend has no primitive for the requested operation."""

    error_code = ErrorCode.UNSUPPORTED_OPERATION

    def __init__(self, backend: str, operation: str):
        message = f"Cache backend '{backend}' does not support {operation}"
        super().__init__(message, {"backend": backend, "operation": operation})
        self.backend = backend
        self.operation = operation


def extract_error_code(error: Exception) -> ErrorCode:
    """
    Extract the appropriate ErrorCode from an exception.

    Args:
        error: Exception to categorize

    Returns:
        ErrorCode of a Cachefront error, INTERNAL_ERROR for anything else
    """
    if isinstance(error, CachefrontError):
        return error.error_code

    return ErrorCode.INTERNAL_ERROR
