# Tool Authenticator: resolves a bearer token to LinkedIn credentials.
# Created: 2026-10-12

from __future__ import annotations

import logging

from linkedin_mcp.api.oauth2.models import SessionRecord, UpstreamCredentials
from linkedin_mcp.api.oauth2.storage import TTLStore
from linkedin_mcp.security.session_tokens import verify_session_token

logger = logging.getLogger(__name__)


class ToolAuthenticator:
    """Per-request hook used by the tool-serving layer.

    Never rejects a request itself: unauthenticated callers get ``None`` and
    each tool decides whether it needs an identity.
    """

    def __init__(self, secret: str, sessions: TTLStore[SessionRecord]):
        self._secret = secret
        self._sessions = sessions

    def authenticate(self, authorization: str | None) -> UpstreamCredentials | None:
        """Return the credentials behind an ``Authorization`` header value."""
        if not authorization:
            return None

        scheme, _, token = authorization.strip().partition(" ")
        token = token.strip()
        if scheme.lower() != "bearer" or not token:
            return None

        payload = verify_session_token(token, self._secret)
        if payload is None:
            return None

        subject = payload.get("sub")
        if not isinstance(subject, str) or not subject:
            return None

        record = self._sessions.get(subject)
        if record is None:
            logger.debug("Valid token without a live session")
            return None
        return record.credentials
