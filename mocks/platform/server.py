"""
Mock host platform providing extension app authentication and JWKS endpoints.
"""

import argparse
import secrets
import time
from typing import Dict, Optional, Set, Tuple

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from shared.logging import get_logger
from shared.test_helpers import TestSigningKey, create_mock_jwt_token, create_signing_key


class AppAuthenticateRequest(BaseModel):
    appId: Optional[str] = None
    appToken: Optional[str] = None


class TokenPairRequest(BaseModel):
    appToken: Optional[str] = None
    symphonyToken: Optional[str] = None


class MockPlatformServer:
    """Mock platform implementation.

    Unlike the real service under test, the platform does keep handshake
    state: issued pairs live in memory until they expire.
    """

    def __init__(
        self,
        registered_apps: Set[str] = frozenset({"acme-app"}),
        issuer: str = "symphony",
        token_ttl_seconds: int = 300,
        signing_key: Optional[TestSigningKey] = None,
    ):
        self.logger = get_logger("mock.platform")
        self.app = FastAPI(title="Mock Platform", version="1.0.0")
        self.registered_apps = set(registered_apps)
        self.issuer = issuer
        self.token_ttl_seconds = token_ttl_seconds
        self.signing_key = signing_key or create_signing_key(kid="platform-key-1")

        # (appToken, symphonyToken) -> expiry epoch seconds
        self.handshakes: Dict[Tuple[str, str], float] = {}
        self.calls: Dict[str, int] = {"authenticate": 0, "validate": 0, "jwks": 0}

        self._setup_routes()

    def _setup_routes(self):
        """Set up mock platform routes."""

        @self.app.get("/")
        async def root():
            return {
                "service": "mock-platform",
                "issuer": self.issuer,
                "registered_apps": sorted(self.registered_apps),
            }

        @self.app.post("/sessionauth/v1/authenticate/extension/app")
        async def authenticate(request: AppAuthenticateRequest):
            self.calls["authenticate"] += 1
            if request.appId not in self.registered_apps or not request.appToken:
                self.logger.info("Denying extension app", app_id=request.appId)
                raise HTTPException(status_code=401, detail="Invalid extension app credentials")

            symphony_token = secrets.token_urlsafe(32)
            expires_at = time.time() + self.token_ttl_seconds
            self.handshakes[(request.appToken, symphony_token)] = expires_at

            return {
                "appId": request.appId,
                "appToken": request.appToken,
                "symphonyToken": symphony_token,
                "expireAt": int(expires_at * 1000),
            }

        @self.app.post("/sessionauth/v1/authenticate/extension/app/tokens/validate")
        async def validate(request: TokenPairRequest):
            self.calls["validate"] += 1
            expires_at = self.handshakes.get((request.appToken, request.symphonyToken))
            if expires_at is None or expires_at <= time.time():
                raise HTTPException(status_code=401, detail="Unknown or expired token pair")
            return {"valid": True}

        @self.app.get("/pod/v1/jwks")
        async def jwks():
            self.calls["jwks"] += 1
            return self.signing_key.jwks()

        @self.app.post("/pod/v1/jwt")
        async def issue_jwt(app_id: str, expires_in: int = 300):
            """Mint a signed assertion the way the platform would for a logged-in user."""
            if app_id not in self.registered_apps:
                raise HTTPException(status_code=404, detail="App not found")
            return {
                "jwt": create_mock_jwt_token(
                    self.signing_key,
                    app_id=app_id,
                    issuer=self.issuer,
                    expires_in=expires_in,
                )
            }


def main():
    parser = argparse.ArgumentParser(description="Run the mock host platform")
    parser.add_argument("--port", type=int, default=8443)
    parser.add_argument("--app", action="append", default=None, help="Registered extension app id")
    args = parser.parse_args()

    import uvicorn
    server = MockPlatformServer(registered_apps=set(args.app or ["acme-app"]))
    uvicorn.run(server.app, host="0.0.0.0", port=args.port)


if __name__ == "__main__":
    main()
