"""
Identity registry package.

Loaded once at startup from configuration and read-only afterwards, so it
is safe to share across concurrent requests without locking.
"""

from .registry import IdentityRegistry

__all__ = ["IdentityRegistry"]
