"""HMAC-signed bearer tokens issued by the OAuth proxy.

Tokens are compact HS256 JWTs carrying ``iat``, ``exp`` and a random ``jti``
next to the caller's claims. Expiry is checked against an injectable ``now``
rather than inside PyJWT so tests can move time.

The signing secret lives for the process lifetime. When none is configured a
random one is generated at startup, so a restart invalidates every
outstanding token; downstream clients then re-authenticate.
"""

import secrets
import time
from typing import Any

import jwt

__all__ = ["create_session_token", "verify_session_token", "generate_secret"]

ALGORITHM = "HS256"

_DECODE_OPTIONS = {"verify_exp": False, "verify_iat": False, "verify_nbf": False}


def generate_secret() -> str:
    """Return a fresh 256-bit signing secret (hex)."""
    return secrets.token_hex(32)


def create_session_token(
    secret: str,
    claims: dict[str, Any],
    ttl_seconds: int = 3600,
    now: float | None = None,
) -> str:
    """Issue a token carrying *claims* that expires after *ttl_seconds*.

    ``iat``, ``exp`` and a random ``jti`` are added to the payload.
    """
    issued_at = int(time.time() if now is None else now)
    payload = {
        **claims,
        "iat": issued_at,
        "exp": issued_at + ttl_seconds,
        "jti": secrets.token_hex(16),
    }
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def verify_session_token(
    token: str,
    secret: str,
    now: float | None = None,
) -> dict[str, Any] | None:
    """Verify a token. Returns its payload, or None if invalid or expired."""
    try:
        payload = jwt.decode(token, secret, algorithms=[ALGORITHM], options=_DECODE_OPTIONS)
    except jwt.PyJWTError:
        return None

    exp = payload.get("exp")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        return None
    if exp < (time.time() if now is None else now):
        return None

    return payload
