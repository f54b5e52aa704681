"""
Shared error handling for the Read-Aside Item Service.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel

from opentelemetry import trace


class ErrorResponse(BaseModel):
    """Standard error response format."""

    trace_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class ReadAsideException(Exception):
    """Base exception for Read-Aside services."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        trace_id = None
        current_span = trace.get_current_span()
        if current_span and current_span.is_recording():
            span_context = current_span.get_span_context()
            if span_context.trace_id != 0:
                trace_id = f"{span_context.trace_id:032x}"

        return ErrorResponse(
            trace_id=trace_id,
            code=self.code,
            message=self.message,
            details=self.details
        )


class ValidationError(ReadAsideException):
    """Validation-related errors."""

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class NotFoundError(ReadAsideException):
    """Requested entity does not exist."""

    def __init__(self, code: str = "NOT_FOUND", message: str = "Not found", details: Optional[Dict[str, Any]] = None):
        super().__init__(code, message, details)


class ExternalServiceError(ReadAsideException):
    """Errors raised while talking to an external dependency."""

    def __init__(self, code: str, service: str, message: str = "External service error",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(code, f"{service}: {message}", details)
        self.service = service
