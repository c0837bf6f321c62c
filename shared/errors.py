"""
Shared error handling for the Orders Access service.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response format."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class AccessLayerException(Exception):
    """Base exception for Orders Access services."""

    status_code: int = 400

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self, request_id: Optional[str] = None) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            request_id=request_id,
            code=self.code,
            message=self.message,
            details=self.details
        )


class ValidationError(AccessLayerException):
    """Malformed client input, rejected before it reaches the store."""

    status_code = 400

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class StoreError(AccessLayerException):
    """The ordered store call failed (network, throttling, bad query). Never retried."""

    status_code = 500

    def __init__(self, operation: str, message: str = "Order store error", details: Optional[Dict[str, Any]] = None):
        super().__init__("STORE_ERROR", f"{operation}: {message}", details)
        self.operation = operation


class CacheUnavailable(AccessLayerException):
    """The cursor cache backend could not be reached.

    Callers degrade this to a cache miss (reads) or a no-op (writes and
    invalidation); it should never reach an HTTP client.
    """

    status_code = 503

    def __init__(self, message: str = "Cursor cache unavailable", details: Optional[Dict[str, Any]] = None):
        super().__init__("CACHE_UNAVAILABLE", message, details)
