# LinkedIn REST client: the slice of the API the MCP tools need.
# Created: 2026-10-12

from __future__ import annotations

import logging
from typing import Any

import httpx

from linkedin_mcp.api.oauth2.models import UpstreamCredentials

logger = logging.getLogger(__name__)

API_BASE = "https://api.linkedin.com/v2"
API_VERSION = "202501"


class LinkedInAPIError(Exception):
    """Non-2xx answer from the LinkedIn REST API."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        super().__init__(f"LinkedIn API error ({status_code}): {message}")


class LinkedInClient:
    """Calls LinkedIn with an end user's bearer token.

    Usage::

        async with LinkedInClient(credentials) as client:
            profile = await client.get_current_user_profile()
    """

    def __init__(
        self,
        credentials: UpstreamCredentials,
        user_agent: str = "LinkedInMCPServer/1.0.0",
        http_client: httpx.AsyncClient | None = None,
    ):
        self.credentials = credentials
        self.user_agent = user_agent
        self._http = http_client or httpx.AsyncClient(base_url=API_BASE, timeout=30.0)
        self._owns_http = http_client is None

    async def __aenter__(self) -> LinkedInClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def _get(self, path: str) -> dict[str, Any]:
        resp = await self._http.get(
            path,
            headers={
                "Authorization": f"Bearer {self.credentials.access_token}",
                "User-Agent": self.user_agent,
                "LinkedIn-Version": API_VERSION,
                "X-Restli-Protocol-Version": "2.0.0",
            },
        )
        if not resp.is_success:
            try:
                message = resp.json().get("message") or resp.reason_phrase
            except (ValueError, AttributeError):
                message = resp.reason_phrase
            raise LinkedInAPIError(resp.status_code, message)
        return resp.json()

    async def get_current_user_profile(self) -> dict[str, Any]:
        """OpenID Connect userinfo for the authenticated member."""
        return await self._get("/userinfo")


def format_profile(profile: dict[str, Any]) -> str:
    """Render a userinfo document as short markdown."""
    name = profile.get("name") or " ".join(
        p for p in (profile.get("given_name"), profile.get("family_name")) if p
    )
    lines = [f"## {name or 'Unknown member'}"]
    if profile.get("email"):
        verified = " (verified)" if profile.get("email_verified") else ""
        lines.append(f"- Email: {profile['email']}{verified}")
    if profile.get("locale"):
        locale = profile["locale"]
        if isinstance(locale, dict):
            locale = "_".join(v for v in (locale.get("language"), locale.get("country")) if v)
        lines.append(f"- Locale: {locale}")
    if profile.get("sub"):
        lines.append(f"- Member ID: {profile['sub']}")
    if profile.get("picture"):
        lines.append(f"- Picture: {profile['picture']}")
    return "\n".join(lines)
