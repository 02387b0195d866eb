"""
Shared configuration management for the Extension App Auth service.
"""

from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="EXTAPP_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8020)


class ExtAppAuthConfig(BaseConfig):
    """Extension app authentication settings.

    ``ext_app_id`` has no default: a deployment without an expected
    application identifier fails at startup.
    """

    ext_app_id: str

    # Host platform authentication service
    platform_auth_url: str = Field(default="http://localhost:8443/sessionauth")
    platform_timeout_seconds: float = Field(default=10.0, gt=0)

    # Signed assertion verification
    platform_jwt_issuer: str = Field(default="symphony")
    platform_jwks_url: str = Field(default="http://localhost:8443/pod/v1/jwks")
    jwt_algorithms: List[str] = Field(default_factory=lambda: ["RS256", "RS384", "RS512"])
    jwks_cache_ttl_seconds: int = Field(default=3600, ge=0)
    verify_jwt_audience: bool = Field(default=True)


def get_config(**overrides) -> ExtAppAuthConfig:
    """Load the service configuration from the environment."""
    return ExtAppAuthConfig(**overrides)
