# OAuth2 schemas.
# Created: 2026-10-12

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class ClientRegistrationRequest(BaseModel):
    """Dynamic client registration request (RFC 7591 subset)."""

    model_config = ConfigDict(extra="allow")

    redirect_uris: list[str] = []
    client_name: str | None = None


class TokenRequest(BaseModel):
    """Token request; grant_type is checked by the proxy, not the schema."""

    model_config = ConfigDict(extra="ignore")

    grant_type: str | None = None
    code: str | None = None
    code_verifier: str | None = None
    client_id: str | None = None
    client_secret: str | None = None
    redirect_uri: str | None = None


class TokenResponse(BaseModel):
    """OAuth2 bearer token response."""

    access_token: str
    token_type: str = "Bearer"
    expires_in: int
    scope: str
