"""
Verification of platform-signed assertions (JWT).
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Union

from jose import jws, jwt
from jose.exceptions import ExpiredSignatureError, JOSEError, JWTClaimsError

from ..models import SignedAssertion
from .keys import PlatformKeySource


class RejectionReason(str, Enum):
    """Why an assertion was refused. Logged internally, never returned to callers."""

    MALFORMED = "malformed"
    BAD_SIGNATURE = "bad-signature"
    EXPIRED = "expired"
    NOT_YET_VALID = "not-yet-valid"
    INVALID_CLAIMS = "invalid-claims"


@dataclass(frozen=True)
class Verified:
    claims: Dict[str, Any]


@dataclass(frozen=True)
class Rejected:
    reason: RejectionReason
    detail: str = field(default="", compare=False)


VerificationResult = Union[Verified, Rejected]


class AssertionVerifier:
    """Checks structure, signature, validity window and claims of a JWT.

    Verification is all-or-nothing and every failure is a ``Rejected``
    value: forged or garbled input is expected, so low-level crypto errors
    are folded into ``bad-signature`` instead of escaping. Only a key
    source outage raises (``UpstreamUnavailable``).
    """

    def __init__(
        self,
        key_source: PlatformKeySource,
        *,
        algorithms: Iterable[str] = ("RS256", "RS384", "RS512"),
        audience: Optional[str] = None,
        issuer: Optional[str] = None,
    ) -> None:
        self.key_source = key_source
        self.algorithms = list(algorithms)
        self.audience = audience
        self.issuer = issuer

    async def verify(self, assertion: Union[SignedAssertion, str, None]) -> VerificationResult:
        raw = assertion.raw if isinstance(assertion, SignedAssertion) else assertion
        if not isinstance(raw, str) or raw.count(".") != 2:
            return Rejected(RejectionReason.MALFORMED, "not a compact JWS")

        try:
            header = jws.get_unverified_header(raw)
            unverified_claims = jwt.get_unverified_claims(raw)
        except JOSEError as exc:
            return Rejected(RejectionReason.MALFORMED, str(exc))

        kid = header.get("kid")
        keys = await self.key_source.get_keys(
            unverified_claims.get("iss"),
            kid if isinstance(kid, str) else None,
        )
        if not keys:
            return Rejected(RejectionReason.BAD_SIGNATURE, "no verification key for issuer")

        options = {"leeway": 0, "verify_aud": self.audience is not None}
        try:
            claims = jwt.decode(
                raw,
                keys,
                algorithms=self.algorithms,
                audience=self.audience,
                issuer=self.issuer,
                options=options,
            )
        except ExpiredSignatureError as exc:
            return Rejected(RejectionReason.EXPIRED, str(exc))
        except JWTClaimsError as exc:
            if "not yet valid" in str(exc):
                return Rejected(RejectionReason.NOT_YET_VALID, str(exc))
            return Rejected(RejectionReason.INVALID_CLAIMS, str(exc))
        except (TypeError, OverflowError) as exc:
            # Non-numeric or non-finite time claims
            return Rejected(RejectionReason.INVALID_CLAIMS, str(exc))
        except (JOSEError, ValueError) as exc:
            return Rejected(RejectionReason.BAD_SIGNATURE, str(exc))

        return self._check_required(claims)

    def _check_required(self, claims: Dict[str, Any]) -> VerificationResult:
        # python-jose skips absent exp/aud and accepts exp == now.
        if "exp" not in claims:
            return Rejected(RejectionReason.INVALID_CLAIMS, "missing exp")
        if int(claims["exp"]) <= time.time():
            return Rejected(RejectionReason.EXPIRED, "token expired")
        if self.audience is not None and "aud" not in claims:
            return Rejected(RejectionReason.INVALID_CLAIMS, "missing aud")
        return Verified(claims)
