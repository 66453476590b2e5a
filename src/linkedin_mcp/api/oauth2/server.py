# OAuth authorization proxy in front of LinkedIn.
# Created: 2026-10-12
#
# Downstream MCP clients see a standard authorization server (discovery,
# dynamic registration, authorize, token). Behind it the proxy runs
# LinkedIn's own non-PKCE code flow and keeps the resulting credentials
# server-side, handing out its own signed bearer tokens instead.
#
# Per attempt: STARTED (transaction) -> UPSTREAM_APPROVED (authorization
# code) -> REDEEMED (session). A failure anywhere drops the attempt; leftover
# entries age out with their store's TTL.

from __future__ import annotations

import base64
import hashlib
import hmac
import logging
from dataclasses import dataclass
from urllib.parse import urlencode, urlsplit, urlunsplit

from linkedin_mcp.api.oauth2.models import (
    LINKEDIN_SCOPES,
    AuthorizationCode,
    RegisteredClient,
    SessionRecord,
    Transaction,
    UpstreamCredentials,
)
from linkedin_mcp.api.oauth2.storage import OAuthStorage, new_identifier
from linkedin_mcp.integrations.oauth import UpstreamExchanger, UpstreamExchangeError
from linkedin_mcp.mcp.auth import ToolAuthenticator
from linkedin_mcp.security.session_tokens import create_session_token, generate_secret

logger = logging.getLogger(__name__)

ACCESS_TOKEN_TTL = 3600
CALLBACK_PATH = "/oauth/callback"
PKCE_METHODS = ("S256", "plain")


@dataclass
class OAuthError:
    """OAuth error reported to the caller as ``{"error", "error_description"}``."""

    error: str
    description: str | None = None
    status_code: int = 400

    def to_dict(self) -> dict[str, str | None]:
        body: dict[str, str | None] = {"error": self.error}
        if self.description is not None:
            body["error_description"] = self.description
        return body


def append_query(url: str, params: dict[str, str]) -> str:
    """Add *params* to the query string of *url*, keeping existing ones."""
    parts = urlsplit(url)
    extra = urlencode(params)
    query = f"{parts.query}&{extra}" if parts.query else extra
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def _is_absolute_url(url: str) -> bool:
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    return bool(parts.scheme and parts.netloc)


def verify_pkce(code_verifier: str, code_challenge: str, method: str | None) -> bool:
    """Check a PKCE verifier against the stored challenge (RFC 7636)."""
    if (method or "plain") == "S256":
        computed = (
            base64.urlsafe_b64encode(hashlib.sha256(code_verifier.encode()).digest())
            .rstrip(b"=")
            .decode()
        )
    else:
        computed = code_verifier
    return hmac.compare_digest(computed.encode(), code_challenge.encode())


class OAuthProxy:
    """OAuth 2.0 authorization server that delegates login to LinkedIn."""

    def __init__(
        self,
        base_url: str,
        exchanger: UpstreamExchanger,
        storage: OAuthStorage | None = None,
        secret: str | None = None,
        scopes: list[str] | None = None,
        check_pkce: bool = True,
    ):
        self.base_url = base_url.rstrip("/")
        self.exchanger = exchanger
        self.storage = storage or OAuthStorage()
        self.secret = secret or generate_secret()
        self.scopes = list(scopes or LINKEDIN_SCOPES)
        self.check_pkce = check_pkce
        self.authenticator = ToolAuthenticator(self.secret, self.storage.sessions)

    @property
    def callback_url(self) -> str:
        return f"{self.base_url}{CALLBACK_PATH}"

    # -- discovery / registration ------------------------------------------

    def metadata(self) -> dict:
        """Authorization server metadata (RFC 8414)."""
        return {
            "issuer": self.base_url,
            "authorization_endpoint": f"{self.base_url}/oauth/authorize",
            "token_endpoint": f"{self.base_url}/oauth/token",
            "registration_endpoint": f"{self.base_url}/oauth/register",
            "response_types_supported": ["code"],
            "grant_types_supported": ["authorization_code", "refresh_token"],
            "code_challenge_methods_supported": list(PKCE_METHODS),
            "scopes_supported": list(self.scopes),
            "token_endpoint_auth_methods_supported": [
                "client_secret_post",
                "client_secret_basic",
            ],
        }

    def register_client(
        self,
        redirect_uris: list[str],
        client_name: str | None = None,
    ) -> dict:
        """Dynamic client registration (RFC 7591).

        The secret equals the client ID: downstream clients are only told
        apart by their redirect URIs.
        """
        client_id = new_identifier(16)
        client = RegisteredClient(
            client_id=client_id,
            client_secret=client_id,
            redirect_uris=list(redirect_uris),
            client_name=client_name,
        )
        self.storage.clients.put(client_id, client)
        logger.info("Registered client %s...", client_id[:8])

        response = {
            "client_id": client_id,
            "client_secret": client_id,
            "client_id_issued_at": int(client.created_at),
            "client_secret_expires_at": 0,
            "redirect_uris": client.redirect_uris,
            "grant_types": ["authorization_code", "refresh_token"],
            "response_types": ["code"],
            "token_endpoint_auth_method": "client_secret_post",
        }
        if client_name:
            response["client_name"] = client_name
        return response

    # -- authorize ---------------------------------------------------------

    def start_authorization(
        self,
        client_id: str | None,
        redirect_uri: str | None,
        response_type: str | None,
        state: str | None = None,
        scope: str | None = None,
        code_challenge: str | None = None,
        code_challenge_method: str | None = None,
    ) -> tuple[str | None, OAuthError | None]:
        """Record a transaction and build the LinkedIn redirect.

        Returns (upstream_url, error).
        """
        if not client_id or not redirect_uri or response_type != "code":
            return None, OAuthError("invalid_request", "Missing required parameters")

        if not _is_absolute_url(redirect_uri):
            return None, OAuthError("invalid_request", "Invalid redirect_uri")

        if code_challenge_method and code_challenge_method not in PKCE_METHODS:
            return None, OAuthError(
                "invalid_request", f"Unsupported code_challenge_method: {code_challenge_method}"
            )

        txn_id = new_identifier(32)
        self.storage.transactions.put(
            txn_id,
            Transaction(
                client_id=client_id,
                redirect_uri=redirect_uri,
                state=state or new_identifier(16),
                scopes=scope.split() if scope else list(self.scopes),
                code_challenge=code_challenge or None,
                code_challenge_method=(code_challenge_method or "plain") if code_challenge else None,
            ),
        )

        # PKCE stays between the downstream client and us; LinkedIn has none.
        url = self.exchanger.get_auth_url(self.callback_url, self.scopes, txn_id)
        logger.info("Redirecting to LinkedIn (transaction: %s...)", txn_id[:8])
        return url, None

    # -- callback ----------------------------------------------------------

    async def complete_callback(
        self,
        code: str | None,
        state: str | None,
        error: str | None = None,
        error_description: str | None = None,
    ) -> tuple[str | None, OAuthError | None]:
        """Handle LinkedIn's redirect back to the proxy.

        Returns (downstream_redirect_url, error). A returned error is reported
        to the browser directly; exchange failures are instead redirected to
        the downstream client with ``error=server_error``.
        """
        if error:
            logger.warning("LinkedIn error: %s - %s", error, error_description)
            return None, OAuthError(error, error_description)

        if not code or not state:
            return None, OAuthError("invalid_request", "Missing code or state")

        # Consumed before the exchange so a replayed callback cannot reuse it.
        txn = self.storage.transactions.pop(state)
        if txn is None:
            return None, OAuthError("invalid_request", "Invalid or expired state")

        try:
            credentials = await self.exchanger.exchange_code(code, self.callback_url)
        except UpstreamExchangeError as e:
            logger.error("Token exchange failed: %s", e)
            return append_query(
                txn.redirect_uri,
                {
                    "error": "server_error",
                    "error_description": str(e),
                    "state": txn.state,
                },
            ), None

        our_code = new_identifier(32)
        self.storage.codes.put(
            our_code,
            AuthorizationCode(
                client_id=txn.client_id,
                redirect_uri=txn.redirect_uri,
                credentials=credentials,
                code_challenge=txn.code_challenge,
                code_challenge_method=txn.code_challenge_method,
            ),
        )
        logger.info("LinkedIn approved, redirecting to client %s...", txn.client_id[:8])
        return append_query(txn.redirect_uri, {"code": our_code, "state": txn.state}), None

    # -- token -------------------------------------------------------------

    def exchange_token(
        self,
        grant_type: str | None,
        code: str | None = None,
        code_verifier: str | None = None,
        client_id: str | None = None,
        redirect_uri: str | None = None,
    ) -> tuple[dict | None, OAuthError | None]:
        """Redeem an authorization code for a signed access token.

        Returns (token_dict, error). Contains no await: the used-check and
        the mark-used below cannot interleave with another redemption.
        """
        if grant_type != "authorization_code":
            return None, OAuthError("unsupported_grant_type")

        if not code:
            return None, OAuthError("invalid_request", "Missing code")

        auth_code = self.storage.codes.get(code)
        if auth_code is None:
            return None, OAuthError("invalid_grant", "Invalid or expired code")

        if auth_code.used:
            return None, OAuthError("invalid_grant", "Code already used")

        if client_id and client_id != auth_code.client_id:
            return None, OAuthError("invalid_grant", "Code was issued to another client")

        if redirect_uri and redirect_uri != auth_code.redirect_uri:
            return None, OAuthError("invalid_grant", "redirect_uri mismatch")

        if self.check_pkce and auth_code.code_challenge:
            if not code_verifier or not verify_pkce(
                code_verifier, auth_code.code_challenge, auth_code.code_challenge_method
            ):
                return None, OAuthError("invalid_grant", "Invalid code_verifier")

        auth_code.used = True

        scope = " ".join(self.scopes)
        subject = new_identifier(16)
        access_token = create_session_token(
            self.secret, {"sub": subject, "scope": scope}, ACCESS_TOKEN_TTL
        )
        self.storage.sessions.put(subject, SessionRecord(credentials=auth_code.credentials))
        logger.info("Issued access token for client %s...", auth_code.client_id[:8])

        return {
            "access_token": access_token,
            "token_type": "Bearer",
            "expires_in": ACCESS_TOKEN_TTL,
            "scope": scope,
        }, None

    # -- tool calls / housekeeping -----------------------------------------

    def authenticate(self, authorization: str | None) -> UpstreamCredentials | None:
        return self.authenticator.authenticate(authorization)

    def sweep_expired(self, now: float | None = None) -> dict[str, int]:
        return self.storage.sweep_expired(now)
