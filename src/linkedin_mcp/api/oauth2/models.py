# OAuth proxy data models.
# Created: 2026-10-12

from __future__ import annotations

import time
from dataclasses import dataclass, field

# Scopes requested from LinkedIn and advertised to downstream clients
LINKEDIN_SCOPES: list[str] = ["openid", "profile", "email", "w_member_social"]


@dataclass
class UpstreamCredentials:
    """Credential bundle issued by LinkedIn for one end user."""

    access_token: str
    refresh_token: str | None = None
    expires_at: float | None = None  # Unix timestamp
    scopes: list[str] = field(default_factory=list)


@dataclass
class RegisteredClient:
    """Downstream client created through dynamic registration."""

    client_id: str
    client_secret: str
    redirect_uris: list[str] = field(default_factory=list)
    client_name: str | None = None
    created_at: float = field(default_factory=time.time)


@dataclass
class Transaction:
    """In-flight authorize request waiting for the LinkedIn callback."""

    client_id: str
    redirect_uri: str
    state: str
    scopes: list[str] = field(default_factory=lambda: list(LINKEDIN_SCOPES))
    code_challenge: str | None = None
    code_challenge_method: str | None = None
    created_at: float = field(default_factory=time.time)


@dataclass
class AuthorizationCode:
    """One-time code handed to the downstream client after LinkedIn approved."""

    client_id: str
    redirect_uri: str
    credentials: UpstreamCredentials
    code_challenge: str | None = None
    code_challenge_method: str | None = None
    created_at: float = field(default_factory=time.time)
    used: bool = False


@dataclass
class SessionRecord:
    """Maps a downstream access token subject to LinkedIn credentials."""

    credentials: UpstreamCredentials
    created_at: float = field(default_factory=time.time)
