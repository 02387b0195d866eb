"""
Extension App Auth service.
"""

from typing import Optional

from fastapi import Response
from fastapi.responses import JSONResponse

from shared.base_service import BaseService
from shared.config import ExtAppAuthConfig, get_config
from shared.errors import AuthenticationError, ClientInputError, InfrastructureError
from .assertion import AssertionVerifier, PlatformKeySource
from .handshake import HandshakeOrchestrator, HandshakeOutcome, OutcomeCategory
from .identity import IdentityRegistry
from .models import HandshakeRequest, SignedAssertion, TokenPair
from .platform import PlatformAuthClient


_FAILURES = {
    OutcomeCategory.CLIENT_INPUT_ERROR: ClientInputError,
    OutcomeCategory.UNAUTHORIZED: AuthenticationError,
    OutcomeCategory.INFRASTRUCTURE_ERROR: InfrastructureError,
}


class ExtAppAuthService(BaseService):
    """Extension app authentication service implementation."""

    def __init__(
        self,
        config: Optional[ExtAppAuthConfig] = None,
        *,
        platform_client: Optional[PlatformAuthClient] = None,
        key_source: Optional[PlatformKeySource] = None,
        assertion_verifier: Optional[AssertionVerifier] = None,
    ):
        super().__init__("extapp-auth", config or get_config())
        self.registry = IdentityRegistry.from_config(self.config)

        self.platform_client = platform_client or PlatformAuthClient(
            self.config.platform_auth_url,
            timeout=self.config.platform_timeout_seconds,
        )
        self.key_source = key_source or PlatformKeySource(
            {self.config.platform_jwt_issuer: self.config.platform_jwks_url},
            cache_ttl=self.config.jwks_cache_ttl_seconds,
            timeout=self.config.platform_timeout_seconds,
        )
        self.assertion_verifier = assertion_verifier or AssertionVerifier(
            self.key_source,
            algorithms=self.config.jwt_algorithms,
            audience=self.registry.expected_identity() if self.config.verify_jwt_audience else None,
            issuer=self.config.platform_jwt_issuer,
        )
        self.orchestrator = HandshakeOrchestrator(
            self.registry,
            self.platform_client,
            self.assertion_verifier,
            metrics=self.metrics,
        )

        self._setup_handshake_routes()

    def _setup_handshake_routes(self):
        """Set up the three handshake endpoints."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "extapp-auth",
                "message": "Extension App Authentication Service",
                "version": "1.0.0"
            }

        @self.app.post("/application/authenticate")
        async def authenticate(request: HandshakeRequest):
            """Step 1: confirm the app identity and initiate the handshake."""
            outcome = await self.orchestrator.authenticate(request)
            return self._respond(outcome, lambda payload: JSONResponse(payload.to_wire()))

        @self.app.post("/application/tokens/validate")
        async def validate_tokens(pair: TokenPair):
            """Step 2: validate the app/platform token pair."""
            outcome = await self.orchestrator.validate_tokens(pair)
            return self._respond(outcome, lambda payload: Response(status_code=200))

        @self.app.post("/application/jwt/validate")
        async def validate_jwt(assertion: SignedAssertion):
            """Step 3: verify the platform-signed JWT and return its claims."""
            outcome = await self.orchestrator.validate_assertion(assertion)
            return self._respond(outcome, lambda payload: JSONResponse(payload))

    @staticmethod
    def _respond(outcome: HandshakeOutcome, render):
        """Render a success or raise the shared error for the outcome category."""
        if outcome.ok:
            return render(outcome.payload)
        raise _FAILURES[outcome.category]()

    async def _check_dependencies(self):
        """Check the platform key endpoint."""
        return {"platform_jwks": await self.key_source.check_health()}

    async def _on_shutdown(self):
        await self.platform_client.close()
        await self.key_source.close()


def create_app(config: Optional[ExtAppAuthConfig] = None, **components):
    """Create FastAPI application."""
    service = ExtAppAuthService(config, **components)
    return service.app


if __name__ == "__main__":
    service = ExtAppAuthService()
    service.run()
