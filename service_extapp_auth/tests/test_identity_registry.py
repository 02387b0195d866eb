"""
Unit tests for IdentityRegistry.
"""

import pytest

from service_extapp_auth.app.identity import IdentityRegistry
from shared.config import ExtAppAuthConfig
from shared.errors import ConfigurationError


class TestIdentityRegistry:
    """Test cases for IdentityRegistry."""

    @pytest.fixture
    def registry(self):
        """Registry expecting acme-app."""
        return IdentityRegistry("acme-app")

    def test_expected_identity(self, registry):
        """Test the configured identity is returned unchanged."""
        assert registry.expected_identity() == "acme-app"

    def test_exact_match(self, registry):
        """Test an identical identifier matches."""
        assert registry.matches("acme-app") is True

    @pytest.mark.parametrize("candidate", ["Acme-App", "ACME-APP", "acme-app ", " acme-app", "acme", "other", ""])
    def test_near_matches_rejected(self, registry, candidate):
        """Test comparison is exact and case-sensitive."""
        assert registry.matches(candidate) is False

    def test_none_does_not_match(self, registry):
        """Test an absent identifier never matches."""
        assert registry.matches(None) is False

    @pytest.mark.parametrize("value", ["", "   ", None])
    def test_missing_identity_is_fatal(self, value):
        """Test construction fails without an expected identity."""
        with pytest.raises(ConfigurationError):
            IdentityRegistry(value)

    def test_from_config(self):
        """Test the registry is built from service configuration."""
        config = ExtAppAuthConfig(ext_app_id="acme-app")
        assert IdentityRegistry.from_config(config).expected_identity() == "acme-app"
