"""
Extension App Auth Service package.

This package exposes the FastAPI application through which a third-party
extension application authenticates itself to the host platform:

- app.main: Application entrypoint that wires routes and lifecycle.
- app.identity: The single application identity this deployment serves.
- app.platform: HTTP client for the platform's authentication service
  (handshake initiation and token-pair validation).
- app.assertion: Signed assertion (JWT) verification and key material.
- app.handshake: Orchestrator that sequences the three handshake steps.

Design notes:
- Module import must not perform network calls. All IO happens in route
  handlers or explicit startup/shutdown hooks.
- Use the shared/ utilities for logging, metrics, config and errors.
- Treat this package as stateless; handshake state lives in the platform
  and in the tokens themselves.
"""
