"""
YApi MCP - Core Error Types

Defines the exception hierarchy for the YApi MCP runtime.
All raised exceptions inherit from YapiMCPError for consistent handling
at the tool boundary.

- ErrorCode enum for structured tool responses
- Origin/transport split for failures reaching the YApi server
- Helpers to turn exceptions into tool error payloads
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """
    Standard error codes for MCP tool responses.

    Used for structured error handling and client-side error recovery.
    """

    # Input validation errors
    INVALID_INPUT = "INVALID_INPUT"

    # Upstream errors
    ORIGIN_ERROR = "ORIGIN_ERROR"
    TRANSPORT_ERROR = "TRANSPORT_ERROR"

    # Catalog errors
    NOT_FOUND = "NOT_FOUND"
    PRELOAD_FAILED = "PRELOAD_FAILED"

    # Startup errors
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # Internal errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class YapiMCPError(Exception):
    """Base exception for all YApi MCP errors."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        status_code: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.status_code = status_code


class ConfigurationError(YapiMCPError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, details, status_code=500)


class OriginError(YapiMCPError):
    """
    Raised when the YApi server answers with a non-zero ``errcode``.

    The origin's code and message are kept as-is so callers can act on them.
    """

    def __init__(self, code: int, message: str, details: dict[str, Any] | None = None):
        error_details = {"errcode": code, "errmsg": message}
        error_details.update(details or {})
        super().__init__(message, error_details, status_code=502)
        self.code = code

    def __str__(self) -> str:
        return self.message


class TransportError(YapiMCPError):
    """Raised when the YApi server cannot be reached or answers with an HTTP error."""

    def __init__(
        self,
        message: str,
        status: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        error_details: dict[str, Any] = {"http_status": status} if status is not None else {}
        error_details.update(details or {})
        super().__init__(message, error_details, status_code=502)
        self.status = status


class PreloadError(YapiMCPError):
    """Raised when preload cannot discover the identifiers it should warm."""

    def __init__(self, scope: Any, reason: str):
        message = f"Failed to discover identifiers for {scope}: {reason}"
        super().__init__(message, {"scope": scope, "reason": reason}, status_code=502)
        self.scope = scope


class ValidationError(YapiMCPError):
    """Raised when input validation fails."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, details, status_code=400)


class NotFoundError(YapiMCPError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        message = f"{resource} not found: {identifier}"
        super().__init__(message, {"resource": resource, "id": identifier}, status_code=404)


def make_error_response(
    error_code: ErrorCode,
    message: str,
    context: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Create a standardized error response for MCP tools.

    Args:
        error_code: Standard error code
        message: Human-readable error message
        context: Additional context/details

    Returns:
        Standardized error response dictionary

    Example:
        >>> make_error_response(
        ...     ErrorCode.NOT_FOUND,
        ...     "Category not found: Billing",
        ...     {"resource": "Category", "id": "Billing"}
        ... )
        {
            "success": False,
            "error_code": "NOT_FOUND",
            "message": "Category not found: Billing",
            "details": {"resource": "Category", "id": "Billing"}
        }
    """
    return {
        "success": False,
        "error_code": error_code.value,
        "message": message,
        "details": context or {},
    }


def extract_error_code(error: Exception) -> ErrorCode:
    """
    Extract appropriate ErrorCode from an exception.

    Args:
        error: Exception to categorize

    Returns:
        Appropriate ErrorCode for the exception
    """
    if isinstance(error, OriginError):
        return ErrorCode.ORIGIN_ERROR

    if isinstance(error, TransportError):
        return ErrorCode.TRANSPORT_ERROR

    if isinstance(error, PreloadError):
        return ErrorCode.PRELOAD_FAILED

    if isinstance(error, NotFoundError):
        return ErrorCode.NOT_FOUND

    if isinstance(error, ValidationError):
        return ErrorCode.INVALID_INPUT

    if isinstance(error, ConfigurationError):
        return ErrorCode.CONFIGURATION_ERROR

    return ErrorCode.INTERNAL_ERROR


def error_response_from_exception(error: Exception) -> dict[str, Any]:
    """Build a tool error response from any exception."""
    if isinstance(error, YapiMCPError):
        return make_error_response(extract_error_code(error), error.message, error.details)
    return make_error_response(ErrorCode.INTERNAL_ERROR, str(error), {"error_type": type(error).__name__})
