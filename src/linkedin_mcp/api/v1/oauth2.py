# OAuth2 router: discovery, registration, authorize, callback, token.
# Created: 2026-10-12

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import ValidationError

from linkedin_mcp.api.deps import get_proxy, rate_limit
from linkedin_mcp.api.oauth2.server import OAuthError, OAuthProxy
from linkedin_mcp.api.v1.schemas.oauth2 import (
    ClientRegistrationRequest,
    TokenRequest,
    TokenResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["OAuth2"])


def _error_response(error: OAuthError) -> JSONResponse:
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@router.get("/.well-known/oauth-authorization-server")
async def metadata(proxy: OAuthProxy = Depends(get_proxy)):
    """Authorization server metadata."""
    return proxy.metadata()


@router.post("/oauth/register", dependencies=[Depends(rate_limit)])
async def register(request: Request, proxy: OAuthProxy = Depends(get_proxy)):
    """Dynamic client registration."""
    raw = await request.body()
    try:
        body = ClientRegistrationRequest.model_validate(json.loads(raw) if raw else {})
    except (ValueError, ValidationError) as e:
        logger.debug("Rejected client registration: %s", e)
        return _error_response(
            OAuthError("invalid_client_metadata", "Body must be a JSON object with redirect_uris")
        )

    return proxy.register_client(body.redirect_uris, client_name=body.client_name)


@router.get("/oauth/authorize", dependencies=[Depends(rate_limit)])
async def authorize(
    client_id: str | None = Query(None),
    redirect_uri: str | None = Query(None),
    response_type: str | None = Query(None),
    state: str | None = Query(None),
    scope: str | None = Query(None),
    code_challenge: str | None = Query(None),
    code_challenge_method: str | None = Query(None),
    proxy: OAuthProxy = Depends(get_proxy),
):
    """Start authorization: record a transaction, then send the user to LinkedIn."""
    url, error = proxy.start_authorization(
        client_id=client_id,
        redirect_uri=redirect_uri,
        response_type=response_type,
        state=state,
        scope=scope,
        code_challenge=code_challenge,
        code_challenge_method=code_challenge_method,
    )
    if error:
        return _error_response(error)
    return RedirectResponse(url, status_code=302)


@router.get("/oauth/callback")
async def callback(
    code: str | None = Query(None),
    state: str | None = Query(None),
    error: str | None = Query(None),
    error_description: str | None = Query(None),
    proxy: OAuthProxy = Depends(get_proxy),
):
    """LinkedIn redirect target."""
    url, oauth_error = await proxy.complete_callback(
        code=code,
        state=state,
        error=error,
        error_description=error_description,
    )
    if oauth_error:
        return _error_response(oauth_error)
    return RedirectResponse(url, status_code=302)


@router.post(
    "/oauth/token", response_model=TokenResponse, dependencies=[Depends(rate_limit)]
)
async def token(request: Request, proxy: OAuthProxy = Depends(get_proxy)):
    """Exchange an authorization code for a bearer token."""
    content_type = request.headers.get("content-type", "")
    try:
        if content_type.startswith("application/json"):
            data = await request.json()
        else:
            data = dict(await request.form())
        body = TokenRequest.model_validate(data)
    except (ValueError, ValidationError):
        return _error_response(OAuthError("invalid_request", "Malformed token request"))

    result, error = proxy.exchange_token(
        grant_type=body.grant_type,
        code=body.code,
        code_verifier=body.code_verifier,
        client_id=body.client_id,
        redirect_uri=body.redirect_uri,
    )
    if error:
        return _error_response(error)
    return JSONResponse(
        TokenResponse(**result).model_dump(), headers={"Cache-Control": "no-store"}
    )
