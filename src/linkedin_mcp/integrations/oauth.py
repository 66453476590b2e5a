# Upstream Exchanger: LinkedIn OAuth 2.0 authorization code flow (no PKCE).
# Created: 2026-10-12
#
# The proxy is the application registered with LinkedIn. Downstream clients
# registered through /oauth/register never talk to LinkedIn directly.

from __future__ import annotations

import logging
import re
import time
import urllib.parse

import httpx

from linkedin_mcp.api.oauth2.models import UpstreamCredentials

logger = logging.getLogger(__name__)


# OAuth 2.0 provider configuration
PROVIDERS: dict[str, dict[str, str]] = {
    "linkedin": {
        "auth_url": "https://www.linkedin.com/oauth/v2/authorization",
        "token_url": "https://www.linkedin.com/oauth/v2/accessToken",
    },
}

DEFAULT_EXPIRES_IN = 3600


class UpstreamExchangeError(Exception):
    """The provider refused the code exchange, or could not be reached."""

    def __init__(self, error: str, description: str = "", status_code: int | None = None):
        self.error = error
        self.description = description
        self.status_code = status_code
        super().__init__(description or error)


class UpstreamExchanger:
    """Builds the upstream authorize URL and trades codes for tokens.

    Args:
        client_id: The proxy's own LinkedIn client ID.
        client_secret: The proxy's own LinkedIn client secret.
        provider: Key into ``PROVIDERS``.
        http_client: Optional shared ``httpx.AsyncClient``; one is created
            (and owned) otherwise.
        timeout: Request timeout for an owned client, in seconds.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        provider: str = "linkedin",
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 15.0,
    ):
        config = PROVIDERS.get(provider)
        if not config:
            raise ValueError(f"Unknown OAuth provider: {provider}")
        self.client_id = client_id
        self.client_secret = client_secret
        self.auth_url = config["auth_url"]
        self.token_url = config["token_url"]
        self._http = http_client
        self._owns_http = http_client is None
        self._timeout = timeout

    def get_auth_url(self, redirect_uri: str, scopes: list[str], state: str) -> str:
        """Return the LinkedIn authorization URL the user is sent to."""
        params = {
            "response_type": "code",
            "client_id": self.client_id,
            "redirect_uri": redirect_uri,
            "state": state,
            "scope": " ".join(scopes),
        }
        return f"{self.auth_url}?{urllib.parse.urlencode(params)}"

    def _client(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=self._timeout)
        return self._http

    async def exchange_code(self, code: str, redirect_uri: str) -> UpstreamCredentials:
        """Exchange a LinkedIn authorization code for a credential bundle.

        Raises:
            UpstreamExchangeError: on a non-2xx response or transport failure.
        """
        logger.info("Exchanging LinkedIn authorization code")
        requested_at = time.time()
        try:
            resp = await self._client().post(
                self.token_url,
                data={
                    "grant_type": "authorization_code",
                    "code": code,
                    "redirect_uri": redirect_uri,
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                },
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            logger.warning("LinkedIn token endpoint unreachable: %s", e)
            raise UpstreamExchangeError("temporarily_unavailable", str(e)) from e

        if not resp.is_success:
            error, description = _parse_error(resp)
            logger.warning(
                "LinkedIn token exchange failed (%s): %s %s", resp.status_code, error, description
            )
            raise UpstreamExchangeError(error, description, resp.status_code)

        try:
            data = resp.json()
            access_token = data["access_token"]
        except (ValueError, KeyError, TypeError) as e:
            raise UpstreamExchangeError(
                "invalid_response", "LinkedIn returned no access token", resp.status_code
            ) from e

        try:
            expires_in = int(data.get("expires_in", DEFAULT_EXPIRES_IN))
        except (TypeError, ValueError):
            expires_in = DEFAULT_EXPIRES_IN

        scope = data.get("scope") or ""
        logger.info("LinkedIn token exchange successful")
        return UpstreamCredentials(
            access_token=access_token,
            refresh_token=data.get("refresh_token"),
            expires_at=requested_at + expires_in,
            scopes=[s for s in re.split(r"[\s,]+", scope) if s],
        )

    async def aclose(self) -> None:
        if self._owns_http and self._http is not None:
            await self._http.aclose()
            self._http = None


def _parse_error(resp: httpx.Response) -> tuple[str, str]:
    """Pull ``error`` / ``error_description`` out of a provider error body."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        error = str(body.get("error") or body.get("serviceErrorCode") or "upstream_error")
        description = str(body.get("error_description") or body.get("message") or "")
        return error, description or resp.reason_phrase
    return "upstream_error", f"HTTP {resp.status_code} {resp.reason_phrase}".strip()
