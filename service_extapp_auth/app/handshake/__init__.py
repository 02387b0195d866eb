"""
Handshake orchestration package.

- outcomes: Outcome categories and the conceptual handshake states.
- orchestrator: Runs identity confirmation, token-pair validation and
  assertion verification, one independent call per step.
"""

from .orchestrator import HandshakeOrchestrator
from .outcomes import HandshakeOutcome, HandshakeState, OutcomeCategory, RejectReason

__all__ = [
    "HandshakeOrchestrator",
    "HandshakeOutcome",
    "HandshakeState",
    "OutcomeCategory",
    "RejectReason",
]
