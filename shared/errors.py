"""
Shared error handling for the Extension App Auth service.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel

from shared.logging import request_id_var


class ErrorResponse(BaseModel):
    """Standard error response format."""

    trace_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class AccessLayerException(Exception):
    """Base exception for the service. Subclasses pin the HTTP status."""

    status_code = 400

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            trace_id=request_id_var.get(),
            code=self.code,
            message=self.message,
            details=self.details
        )


class ClientInputError(AccessLayerException):
    """Malformed or missing request fields."""

    status_code = 400

    def __init__(self, message: str = "Invalid request", details: Optional[Dict[str, Any]] = None):
        super().__init__("CLIENT_INPUT_ERROR", message, details)


class AuthenticationError(AccessLayerException):
    """Caller could not be authenticated.

    The message is kept uniform across every failing check so responses do
    not reveal which one failed.
    """

    status_code = 401

    def __init__(self, message: str = "Unauthorized", details: Optional[Dict[str, Any]] = None):
        super().__init__("AUTHENTICATION_ERROR", message, details)


class InfrastructureError(AccessLayerException):
    """Upstream unreachable or transport fault."""

    status_code = 500

    def __init__(self, message: str = "Upstream service unavailable", details: Optional[Dict[str, Any]] = None):
        super().__init__("INFRASTRUCTURE_ERROR", message, details)


class ConfigurationError(Exception):
    """Required configuration is absent. Raised at startup only."""
