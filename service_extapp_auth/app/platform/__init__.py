"""
Platform authentication client package.

Wraps the two remote operations of the handshake that the host platform
owns: initiating an extension app authentication and validating the
resulting token pair. Failures are split into a client fault
(``AuthenticationDenied``) and an infrastructure fault
(``UpstreamUnavailable``) so the boundary can answer 401 or 500.
"""

from .client import PlatformAuthClient
from .errors import AuthenticationDenied, PlatformAuthError, UpstreamUnavailable

__all__ = [
    "PlatformAuthClient",
    "PlatformAuthError",
    "AuthenticationDenied",
    "UpstreamUnavailable",
]
