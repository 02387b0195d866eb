"""
Tests for the Extension App Auth HTTP endpoints.
"""

from unittest.mock import AsyncMock

import pytest
from pydantic import ValidationError
from fastapi.testclient import TestClient

from service_extapp_auth.app.assertion import AssertionVerifier, PlatformKeySource, Rejected, RejectionReason, Verified
from service_extapp_auth.app.main import ExtAppAuthService, create_app
from service_extapp_auth.app.models import AuthenticateResponse
from service_extapp_auth.app.platform import AuthenticationDenied, PlatformAuthClient, UpstreamUnavailable
from shared.config import ExtAppAuthConfig
from shared.errors import ConfigurationError
from shared.test_helpers import create_authenticate_response


@pytest.fixture
def config():
    return ExtAppAuthConfig(ext_app_id="acme-app")


@pytest.fixture
def authenticate_body():
    return create_authenticate_response(app_token="app-1", platform_token="sym-1")


@pytest.fixture
def platform_client(authenticate_body):
    client = AsyncMock(spec=PlatformAuthClient)
    client.initiate.return_value = AuthenticateResponse.model_validate(authenticate_body)
    client.validate.return_value = True
    return client


@pytest.fixture
def key_source():
    source = AsyncMock(spec=PlatformKeySource)
    source.check_health.return_value = "ok"
    return source


@pytest.fixture
def assertion_verifier():
    verifier = AsyncMock(spec=AssertionVerifier)
    verifier.verify.return_value = Verified({"sub": "7078106482890", "aud": "acme-app", "iss": "symphony"})
    return verifier


@pytest.fixture
def client(config, platform_client, key_source, assertion_verifier):
    """Create test client."""
    app = create_app(
        config,
        platform_client=platform_client,
        key_source=key_source,
        assertion_verifier=assertion_verifier,
    )
    return TestClient(app)


def test_root_endpoint(client):
    """Test root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["service"] == "extapp-auth"
    assert data["version"] == "1.0.0"


def test_health_check(client):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["service"] == "extapp-auth"
    assert data["status"] == "ok"
    assert data["dependencies"] == {"platform_jwks": "ok"}


def test_health_check_degraded(client, key_source):
    """Test health reports 503 when the platform key endpoint is down."""
    key_source.check_health.return_value = "error"
    response = client.get("/health")
    assert response.status_code == 503
    assert response.json()["status"] == "degraded"


def test_metrics_endpoint(config, platform_client, key_source, assertion_verifier):
    """Test Prometheus metrics are exposed and count handshake steps."""
    service = ExtAppAuthService(
        config,
        platform_client=platform_client,
        key_source=key_source,
        assertion_verifier=assertion_verifier,
    )
    client = TestClient(service.app)

    client.post("/application/authenticate", json={"appId": "acme-app"})
    response = client.get("/metrics")

    assert response.status_code == 200
    assert "handshake_steps_total" in response.text
    assert service.metrics.registry.get_sample_value(
        "handshake_steps_total",
        {"step": "authenticate", "category": "success"},
    ) == 1.0


def test_request_id_echoed(client):
    """Test the request id header is propagated to the response."""
    response = client.get("/", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


class TestAuthenticateEndpoint:
    """Test cases for POST /application/authenticate."""

    def test_success(self, client, platform_client, authenticate_body):
        """Test a matching appId returns the platform response."""
        response = client.post("/application/authenticate", json={"appId": "acme-app"})

        assert response.status_code == 200
        assert response.json() == authenticate_body
        platform_client.initiate.assert_awaited_once_with("acme-app")

    @pytest.mark.parametrize("body", [{}, {"appId": None}, {"appToken": "x", "jwt": "y"}])
    def test_missing_app_id(self, client, platform_client, body):
        """Test a missing appId is a 400 regardless of other fields."""
        response = client.post("/application/authenticate", json=body)

        assert response.status_code == 400
        assert response.json()["code"] == "CLIENT_INPUT_ERROR"
        platform_client.initiate.assert_not_awaited()

    def test_unparsable_body(self, client, platform_client):
        """Test a non-JSON body is a 400."""
        response = client.post(
            "/application/authenticate",
            content=b"not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        platform_client.initiate.assert_not_awaited()

    @pytest.mark.parametrize("app_id", ["other", "Acme-App", "acme-app "])
    def test_mismatch(self, client, platform_client, app_id):
        """Test a mismatched appId is a 401 with zero upstream calls."""
        response = client.post("/application/authenticate", json={"appId": app_id})

        assert response.status_code == 401
        assert response.json()["code"] == "AUTHENTICATION_ERROR"
        assert platform_client.initiate.await_count == 0

    def test_denied(self, client, platform_client):
        """Test a platform denial is a 401."""
        platform_client.initiate.side_effect = AuthenticationDenied("denied", status_code=401)

        response = client.post("/application/authenticate", json={"appId": "acme-app"})

        assert response.status_code == 401

    def test_upstream_unavailable(self, client, platform_client):
        """Test an unreachable platform is a 500."""
        platform_client.initiate.side_effect = UpstreamUnavailable("timed out")

        response = client.post("/application/authenticate", json={"appId": "acme-app"})

        assert response.status_code == 500
        assert response.json()["code"] == "INFRASTRUCTURE_ERROR"
        assert platform_client.initiate.await_count == 1

    def test_repeated_authenticate(self, client, platform_client):
        """Test authenticating twice yields two independent successes."""
        platform_client.initiate.side_effect = [
            AuthenticateResponse.model_validate(create_authenticate_response()),
            AuthenticateResponse.model_validate(create_authenticate_response()),
        ]

        first = client.post("/application/authenticate", json={"appId": "acme-app"})
        second = client.post("/application/authenticate", json={"appId": "acme-app"})

        assert first.status_code == second.status_code == 200
        assert first.json()["symphonyToken"] != second.json()["symphonyToken"]


class TestValidateTokensEndpoint:
    """Test cases for POST /application/tokens/validate."""

    def test_valid_pair(self, client, platform_client):
        """Test a valid pair returns 200 with an empty body."""
        response = client.post(
            "/application/tokens/validate",
            json={"appToken": "app-1", "symphonyToken": "sym-1"},
        )

        assert response.status_code == 200
        assert response.content == b""
        pair = platform_client.validate.await_args.args[0]
        assert (pair.app_token, pair.platform_token) == ("app-1", "sym-1")

    def test_invalid_pair(self, client, platform_client):
        """Test an unrecognised pair returns 401."""
        platform_client.validate.return_value = False

        response = client.post(
            "/application/tokens/validate",
            json={"appToken": "app-1", "symphonyToken": "forged"},
        )

        assert response.status_code == 401

    def test_upstream_unavailable(self, client, platform_client):
        """Test a platform outage returns 500."""
        platform_client.validate.side_effect = UpstreamUnavailable("Connection refused")

        response = client.post(
            "/application/tokens/validate",
            json={"appToken": "app-1", "symphonyToken": "sym-1"},
        )

        assert response.status_code == 500


class TestValidateJwtEndpoint:
    """Test cases for POST /application/jwt/validate."""

    def test_verified(self, client):
        """Test verified claims are returned."""
        response = client.post("/application/jwt/validate", json={"jwt": "h.c.s"})

        assert response.status_code == 200
        assert response.json()["sub"] == "7078106482890"

    @pytest.mark.parametrize("reason", list(RejectionReason))
    def test_rejections_are_indistinguishable(self, client, assertion_verifier, reason):
        """Test every rejection gives the same 401 body."""
        assertion_verifier.verify.return_value = Rejected(reason, "internal detail")

        response = client.post("/application/jwt/validate", json={"jwt": "h.c.s"})

        assert response.status_code == 401
        body = response.json()
        assert body["message"] == "Unauthorized"
        assert body["details"] == {}
        assert reason.value not in response.text
        assert "internal detail" not in response.text

    def test_key_source_unavailable(self, client, assertion_verifier):
        """Test a key endpoint outage returns 500."""
        assertion_verifier.verify.side_effect = UpstreamUnavailable("JWKS request failed")

        response = client.post("/application/jwt/validate", json={"jwt": "h.c.s"})

        assert response.status_code == 500


class TestServiceConstruction:
    """Test cases for service wiring."""

    def test_default_components(self, config):
        """Test the service builds its own clients from configuration."""
        service = ExtAppAuthService(config)

        assert service.registry.expected_identity() == "acme-app"
        assert service.platform_client.base_url == config.platform_auth_url
        assert service.platform_client.timeout == config.platform_timeout_seconds
        assert service.key_source.jwks_urls == {"symphony": config.platform_jwks_url}
        assert service.assertion_verifier.audience == "acme-app"
        assert service.assertion_verifier.issuer == "symphony"

    def test_audience_check_can_be_disabled(self):
        """Test audience verification follows configuration."""
        service = ExtAppAuthService(ExtAppAuthConfig(ext_app_id="acme-app", verify_jwt_audience=False))
        assert service.assertion_verifier.audience is None

    def test_missing_app_id_is_fatal(self, monkeypatch):
        """Test the service refuses to start without an expected identity."""
        monkeypatch.delenv("EXTAPP_EXT_APP_ID", raising=False)
        with pytest.raises(ValidationError):
            ExtAppAuthService()

    def test_blank_app_id_is_fatal(self):
        """Test a blank expected identity is a configuration error."""
        with pytest.raises(ConfigurationError):
            ExtAppAuthService(ExtAppAuthConfig(ext_app_id="   "))
