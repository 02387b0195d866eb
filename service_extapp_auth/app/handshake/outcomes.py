"""
Outcome categories of a handshake step.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class HandshakeState(str, Enum):
    """Conceptual position of a caller in the handshake.

    Nothing stores these: they only label transitions in log events.
    """

    AWAITING_APP_ID = "awaiting-app-id"
    AWAITING_TOKEN_VALIDATION = "awaiting-token-validation"
    AWAITING_ASSERTION = "awaiting-assertion"
    COMPLETE = "complete"
    REJECTED = "rejected"


class OutcomeCategory(str, Enum):
    """Response class of a step; the HTTP boundary maps each to one status code."""

    SUCCESS = "success"
    CLIENT_INPUT_ERROR = "client-input-error"
    UNAUTHORIZED = "unauthorized"
    INFRASTRUCTURE_ERROR = "infrastructure-error"


class RejectReason(str, Enum):
    """Internal reason attached to a failed step for logging."""

    MISSING_ID = "missing-id"
    IDENTITY_MISMATCH = "identity-mismatch"
    UNAUTHORIZED = "unauthorized"
    INFRASTRUCTURE_ERROR = "infrastructure-error"


@dataclass(frozen=True)
class HandshakeOutcome:
    """Result of one handshake step.

    ``reason`` and ``detail`` are for logs only; the HTTP boundary answers
    from ``category`` and ``payload`` alone.
    """

    category: OutcomeCategory
    payload: Any = None
    reason: Optional[str] = None
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.category is OutcomeCategory.SUCCESS

    @classmethod
    def success(cls, payload: Any = None) -> "HandshakeOutcome":
        return cls(OutcomeCategory.SUCCESS, payload=payload)

    @classmethod
    def client_input_error(cls, reason: str, detail: Optional[str] = None) -> "HandshakeOutcome":
        return cls(OutcomeCategory.CLIENT_INPUT_ERROR, reason=reason, detail=detail)

    @classmethod
    def unauthorized(cls, reason: str, detail: Optional[str] = None) -> "HandshakeOutcome":
        return cls(OutcomeCategory.UNAUTHORIZED, reason=reason, detail=detail)

    @classmethod
    def infrastructure_error(cls, detail: Optional[str] = None) -> "HandshakeOutcome":
        return cls(
            OutcomeCategory.INFRASTRUCTURE_ERROR,
            reason=RejectReason.INFRASTRUCTURE_ERROR.value,
            detail=detail,
        )
