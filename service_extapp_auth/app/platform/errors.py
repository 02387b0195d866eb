"""
Failures raised by the platform authentication client.
"""

from typing import Optional


class PlatformAuthError(Exception):
    """Base class for platform authentication client failures."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class AuthenticationDenied(PlatformAuthError):
    """The platform refused the handshake (unknown or unregistered app)."""


class UpstreamUnavailable(PlatformAuthError):
    """The platform could not be reached or answered with a server fault."""
