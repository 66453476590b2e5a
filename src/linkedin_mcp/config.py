"""Configuration for the LinkedIn MCP server.

Read from the environment (and an optional ``.env`` file). Variable names
carry no prefix: ``LINKEDIN_CLIENT_ID``, ``BASE_URL``, ``JWT_SECRET`` and so
on.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Server settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # LinkedIn application (the proxy's own upstream identity)
    linkedin_client_id: str = ""
    linkedin_client_secret: str = ""
    linkedin_access_token: str = Field(
        default="", description="Static token used by tools in stdio mode"
    )
    linkedin_user_agent: str = "LinkedInMCPServer/1.0.0"

    # Serving
    host: str = "localhost"
    port: int = 3000
    base_url: str = Field(default="", description="Public URL; defaults to http://host:port")
    transport_type: Literal["http", "stdio"] = "http"

    # Token signing; generated per process when empty
    jwt_secret: str = ""

    # Store lifetimes (seconds). client_ttl 0 keeps registrations forever.
    transaction_ttl: int = 600
    code_ttl: int = 300
    session_ttl: int = 3600
    client_ttl: int = 0
    sweep_interval: float = 60.0

    verify_pkce: bool = True

    # Rate limit for register/authorize/token, per client IP
    auth_rate_per_second: float = 5.0
    auth_rate_burst: int = 30

    @property
    def public_base_url(self) -> str:
        return (self.base_url or f"http://{self.host}:{self.port}").rstrip("/")

    @property
    def mcp_port(self) -> int:
        """The MCP endpoint listens next to the OAuth server."""
        return self.port + 1

    @property
    def mcp_url(self) -> str:
        return f"http://{self.host}:{self.mcp_port}"

    @property
    def has_linkedin_credentials(self) -> bool:
        return bool(self.linkedin_client_id and self.linkedin_client_secret)

    @classmethod
    def load(cls) -> Settings:
        return cls()


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings, read once."""
    return Settings.load()
