"""
Platform signing keys for assertion verification.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx

from ..platform.errors import UpstreamUnavailable


class PlatformKeySource:
    """Fetches and caches the JWKS of each trusted issuer.

    Keys are cached for ``cache_ttl`` seconds. A token naming an unknown
    ``kid`` triggers one eager refresh (key rotation), throttled to once per
    ``min_refresh_interval`` so random ``kid`` values cannot hammer the
    platform. When a refresh fails the stale cache is served; only a cold
    cache surfaces ``UpstreamUnavailable``.
    """

    def __init__(
        self,
        jwks_urls: Dict[str, str],
        *,
        cache_ttl: int = 3600,
        min_refresh_interval: float = 30.0,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.jwks_urls = dict(jwks_urls)
        self.cache_ttl = cache_ttl
        self.min_refresh_interval = min_refresh_interval
        self.timeout = timeout
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None
        self._clock = clock

        # issuer -> (keys, fetched_at)
        self._cache: Dict[str, Tuple[List[Dict[str, Any]], float]] = {}
        # Created on first use so it binds to the serving event loop.
        self._lock: Optional[asyncio.Lock] = None

    async def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def get_keys(self, issuer: Optional[str], kid: Optional[str] = None) -> List[Dict[str, Any]]:
        """Return candidate verification keys for ``issuer``.

        With ``kid`` only the matching key is returned; without it every key
        of the issuer is a candidate. Unknown issuers yield an empty list.
        """
        if not isinstance(issuer, str) or issuer not in self.jwks_urls:
            return []

        keys = self._select(await self._get_jwks(issuer, force=False), kid)
        if kid is not None and not keys:
            keys = self._select(await self._get_jwks(issuer, force=True), kid)
        return keys

    async def check_health(self) -> str:
        """Return 'ok' if every configured JWKS endpoint can be loaded, otherwise 'error'."""
        try:
            for issuer in self.jwks_urls:
                await self._get_jwks(issuer, force=False)
        except UpstreamUnavailable:
            return "error"
        return "ok"

    def clear_cache(self) -> None:
        self._cache.clear()

    async def _get_jwks(self, issuer: str, *, force: bool) -> List[Dict[str, Any]]:
        if self._lock is None:
            self._lock = asyncio.Lock()

        cached = self._cache.get(issuer)
        if cached is not None and not self._is_stale(cached[1], force):
            return cached[0]

        async with self._lock:
            cached = self._cache.get(issuer)
            if cached is not None and not self._is_stale(cached[1], force):
                return cached[0]

            try:
                keys = await self._fetch(self.jwks_urls[issuer])
            except UpstreamUnavailable:
                if cached is not None:
                    return cached[0]
                raise

            self._cache[issuer] = (keys, self._clock())
            return keys

    def _is_stale(self, fetched_at: float, force: bool) -> bool:
        age = self._clock() - fetched_at
        if force:
            return age >= self.min_refresh_interval
        return age >= self.cache_ttl

    async def _fetch(self, url: str) -> List[Dict[str, Any]]:
        try:
            response = await asyncio.wait_for(self._client.get(url), timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except asyncio.TimeoutError as exc:
            raise UpstreamUnavailable(f"JWKS request timed out after {self.timeout}s") from exc
        except httpx.HTTPStatusError as exc:
            raise UpstreamUnavailable(
                f"JWKS request returned {exc.response.status_code}",
                status_code=exc.response.status_code,
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise UpstreamUnavailable(f"JWKS request failed: {exc.__class__.__name__}") from exc

        keys = payload.get("keys") if isinstance(payload, dict) else None
        if not isinstance(keys, list):
            raise UpstreamUnavailable("JWKS response missing 'keys' array")
        return [key for key in keys if isinstance(key, dict)]

    @staticmethod
    def _select(keys: List[Dict[str, Any]], kid: Optional[str]) -> List[Dict[str, Any]]:
        if kid is None:
            return list(keys)
        return [key for key in keys if key.get("kid") == kid]
