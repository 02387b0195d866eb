"""
Sequencing of the three-step extension app handshake.
"""

from typing import Optional

from shared.logging import get_logger
from shared.metrics import MetricsCollector

from ..assertion import AssertionVerifier, Verified
from ..identity import IdentityRegistry
from ..models import HandshakeRequest, SignedAssertion, TokenPair
from ..platform import AuthenticationDenied, PlatformAuthClient, UpstreamUnavailable
from .outcomes import HandshakeOutcome, HandshakeState, OutcomeCategory, RejectReason


class HandshakeOrchestrator:
    """Runs each handshake step and reports its outcome category.

    The steps are independent calls: nothing is remembered between them,
    so repeating a step is always safe. This is the only component that
    logs; one structured ``handshake_transition`` event is emitted per step.
    """

    def __init__(
        self,
        registry: IdentityRegistry,
        platform_client: PlatformAuthClient,
        assertion_verifier: AssertionVerifier,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.registry = registry
        self.platform_client = platform_client
        self.assertion_verifier = assertion_verifier
        self.metrics = metrics
        self.logger = get_logger("extapp_auth.handshake")

    async def authenticate(self, request: HandshakeRequest) -> HandshakeOutcome:
        """Step 1: confirm the app identity, then initiate with the platform."""
        if request.app_id is None:
            outcome = HandshakeOutcome.client_input_error(RejectReason.MISSING_ID.value)
        elif not self.registry.matches(request.app_id):
            # Checked before any network call: an untrusted caller never reaches the platform.
            outcome = HandshakeOutcome.unauthorized(RejectReason.IDENTITY_MISMATCH.value)
        else:
            try:
                response = await self.platform_client.initiate(request.app_id)
            except AuthenticationDenied as exc:
                outcome = HandshakeOutcome.unauthorized(RejectReason.UNAUTHORIZED.value, str(exc))
            except UpstreamUnavailable as exc:
                outcome = HandshakeOutcome.infrastructure_error(str(exc))
            else:
                outcome = HandshakeOutcome.success(response)

        return self._transition(
            "authenticate",
            HandshakeState.AWAITING_APP_ID,
            HandshakeState.AWAITING_TOKEN_VALIDATION,
            outcome,
        )

    async def validate_tokens(self, pair: TokenPair) -> HandshakeOutcome:
        """Step 2: confirm the token pair with the platform."""
        try:
            valid = await self.platform_client.validate(pair)
        except UpstreamUnavailable as exc:
            outcome = HandshakeOutcome.infrastructure_error(str(exc))
        else:
            if valid:
                outcome = HandshakeOutcome.success()
            else:
                outcome = HandshakeOutcome.unauthorized(RejectReason.UNAUTHORIZED.value, "token pair not recognised")

        return self._transition(
            "validate_tokens",
            HandshakeState.AWAITING_TOKEN_VALIDATION,
            HandshakeState.AWAITING_ASSERTION,
            outcome,
        )

    async def validate_assertion(self, assertion: SignedAssertion) -> HandshakeOutcome:
        """Step 3: verify the platform-signed JWT and hand back its claims."""
        try:
            result = await self.assertion_verifier.verify(assertion)
        except UpstreamUnavailable as exc:
            outcome = HandshakeOutcome.infrastructure_error(str(exc))
        else:
            if isinstance(result, Verified):
                outcome = HandshakeOutcome.success(result.claims)
            else:
                outcome = HandshakeOutcome.unauthorized(result.reason.value, result.detail)

        return self._transition(
            "validate_assertion",
            HandshakeState.AWAITING_ASSERTION,
            HandshakeState.COMPLETE,
            outcome,
        )

    def _transition(
        self,
        step: str,
        from_state: HandshakeState,
        success_state: HandshakeState,
        outcome: HandshakeOutcome,
    ) -> HandshakeOutcome:
        to_state = success_state if outcome.ok else HandshakeState.REJECTED
        event = dict(
            step=step,
            from_state=from_state.value,
            to_state=to_state.value,
            category=outcome.category.value,
            reason=outcome.reason,
            detail=outcome.detail,
        )

        if outcome.category is OutcomeCategory.INFRASTRUCTURE_ERROR:
            self.logger.error("handshake_transition", **event)
        elif outcome.ok:
            self.logger.info("handshake_transition", **event)
        else:
            self.logger.warning("handshake_transition", **event)

        if self.metrics is not None:
            self.metrics.record_handshake_step(step, outcome.category.value)
        return outcome
