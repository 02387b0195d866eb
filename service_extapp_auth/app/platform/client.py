"""
Client for the host platform's extension app authentication endpoints.
"""

from __future__ import annotations

import asyncio
import secrets
from typing import Any, Callable, Dict, Optional

import httpx
from pydantic import ValidationError

from ..models import AuthenticateResponse, TokenPair
from .errors import AuthenticationDenied, UpstreamUnavailable


class PlatformAuthClient:
    """Initiates handshakes and validates token pairs against the platform.

    Every request is bounded by ``timeout`` seconds end to end. Nothing is
    retried: a transport fault is reported once as ``UpstreamUnavailable``
    so the caller decides whether to try again.
    """

    AUTHENTICATE_PATH = "/v1/authenticate/extension/app"
    VALIDATE_PATH = "/v1/authenticate/extension/app/tokens/validate"

    DENIED_STATUSES = frozenset({400, 401, 403, 404})
    INVALID_PAIR_STATUSES = frozenset({400, 401, 403, 404, 409, 410})

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
        token_factory: Optional[Callable[[], str]] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None
        self._token_factory = token_factory or (lambda: secrets.token_urlsafe(32))

    async def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def initiate(self, identity: str) -> AuthenticateResponse:
        """Start a handshake for ``identity`` and return the issued token pair."""
        app_token = self._token_factory()
        response = await self._post(
            self.AUTHENTICATE_PATH,
            {"appId": identity, "appToken": app_token},
        )

        if response.status_code in self.DENIED_STATUSES:
            raise AuthenticationDenied(
                "Platform denied extension app authentication",
                status_code=response.status_code,
            )
        if not response.is_success:
            raise UpstreamUnavailable(
                f"Platform authentication returned {response.status_code}",
                status_code=response.status_code,
            )

        payload = self._json_or_none(response)
        if not isinstance(payload, dict):
            raise UpstreamUnavailable("Platform authentication returned an unreadable body")

        try:
            result = AuthenticateResponse.model_validate(payload)
        except ValidationError as exc:
            raise UpstreamUnavailable("Platform authentication returned an invalid body") from exc

        if result.app_token is None:
            result.app_token = app_token
        if result.app_id is None:
            result.app_id = identity
        return result

    async def validate(self, pair: TokenPair) -> bool:
        """Return True when the platform recognises ``pair`` as an active handshake."""
        if not pair.is_complete():
            return False

        response = await self._post(
            self.VALIDATE_PATH,
            {"appToken": pair.app_token, "symphonyToken": pair.platform_token},
        )

        if response.status_code in self.INVALID_PAIR_STATUSES:
            return False
        if not response.is_success:
            raise UpstreamUnavailable(
                f"Platform token validation returned {response.status_code}",
                status_code=response.status_code,
            )

        payload = self._json_or_none(response)
        if isinstance(payload, dict) and payload.get("valid") is False:
            return False
        return True

    async def _post(self, path: str, body: Dict[str, Any]) -> httpx.Response:
        try:
            return await asyncio.wait_for(
                self._client.post(f"{self.base_url}{path}", json=body),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as exc:
            raise UpstreamUnavailable(f"Platform request timed out after {self.timeout}s") from exc
        except httpx.HTTPError as exc:
            raise UpstreamUnavailable(f"Platform request failed: {exc.__class__.__name__}") from exc

    @staticmethod
    def _json_or_none(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return None
