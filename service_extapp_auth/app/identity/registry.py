"""
Expected application identity for this deployment.
"""

import hmac
from typing import Optional

from shared.config import ExtAppAuthConfig
from shared.errors import ConfigurationError


class IdentityRegistry:
    """Holds the one application identifier this deployment serves."""

    def __init__(self, expected_identity: str):
        if not isinstance(expected_identity, str) or not expected_identity.strip():
            raise ConfigurationError("Expected extension app identifier is not configured")
        self._expected = expected_identity

    @classmethod
    def from_config(cls, config: ExtAppAuthConfig) -> "IdentityRegistry":
        return cls(config.ext_app_id)

    def expected_identity(self) -> str:
        return self._expected

    def matches(self, candidate: Optional[str]) -> bool:
        """Exact, case-sensitive comparison in constant time."""
        if candidate is None:
            return False
        return hmac.compare_digest(candidate.encode("utf-8"), self._expected.encode("utf-8"))
