"""
Signed assertion package.

Contains the JWT verifier used in step 3 of the handshake and the key
source that supplies the platform's public signing keys.

Key points:
- Only allow-listed asymmetric algorithms are accepted (no ``none``, no
  HMAC), which rules out algorithm confusion.
- Expiry is checked with zero leeway.
- Keys are selected by issuer first, then by ``kid``.
"""

from .keys import PlatformKeySource
from .verifier import AssertionVerifier, Rejected, RejectionReason, VerificationResult, Verified

__all__ = [
    "AssertionVerifier",
    "PlatformKeySource",
    "Rejected",
    "RejectionReason",
    "VerificationResult",
    "Verified",
]
