"""
Request and response models for the extension app handshake.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class HandshakeRequest(BaseModel):
    """Step 1 input. ``app_id`` stays ``None`` when the caller omits it."""

    model_config = ConfigDict(populate_by_name=True)

    app_id: Optional[str] = Field(default=None, alias="appId")


class TokenPair(BaseModel):
    """Step 2 input. Both tokens are required for the pair to be valid."""

    model_config = ConfigDict(populate_by_name=True)

    app_token: Optional[str] = Field(default=None, alias="appToken")
    platform_token: Optional[str] = Field(default=None, alias="symphonyToken")

    def is_complete(self) -> bool:
        return bool(self.app_token) and bool(self.platform_token)


class SignedAssertion(BaseModel):
    """Step 3 input: a compact JWS as issued by the platform."""

    model_config = ConfigDict(populate_by_name=True)

    raw: Optional[str] = Field(default=None, alias="jwt")


class AuthenticateResponse(BaseModel):
    """Platform answer to a successful handshake initiation.

    Fields the platform adds beyond the known ones are kept and forwarded.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    app_id: Optional[str] = Field(default=None, alias="appId")
    app_token: Optional[str] = Field(default=None, alias="appToken")
    platform_token: Optional[str] = Field(default=None, alias="symphonyToken")
    expire_at: Optional[int] = Field(default=None, alias="expireAt")

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
