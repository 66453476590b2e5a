# Shared FastAPI dependencies for the API layer.
# Created: 2026-10-12

from __future__ import annotations

from fastapi import HTTPException, Request

from linkedin_mcp.api.oauth2.server import OAuthProxy
from linkedin_mcp.security.rate_limiter import RateLimiter


def get_proxy(request: Request) -> OAuthProxy:
    """The OAuthProxy built by ``create_api_app()``."""
    return request.app.state.oauth_proxy


async def rate_limit(request: Request) -> None:
    """FastAPI dependency applying the app's per-IP auth limiter.

    Usage::

        @router.post("/oauth/token", dependencies=[Depends(rate_limit)])
        async def token(...): ...
    """
    limiter: RateLimiter | None = getattr(request.app.state, "rate_limiter", None)
    if limiter is None:
        return

    client_ip = request.client.host if request.client else "unknown"
    info = limiter.check(client_ip)
    if not info.allowed:
        raise HTTPException(
            status_code=429,
            detail={"error": "rate_limited", "error_description": "Too many requests"},
            headers=info.headers(),
        )
