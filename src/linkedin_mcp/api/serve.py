"""HTTP server for the OAuth proxy, plus the MCP endpoint next to it.

``create_api_app()`` builds the OAuth application; ``run_api_server()``
serves it on ``PORT`` and the MCP streamable-HTTP endpoint on ``PORT + 1``.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from linkedin_mcp.api.oauth2.reaper import StoreReaper
from linkedin_mcp.api.oauth2.server import OAuthProxy
from linkedin_mcp.api.oauth2.storage import OAuthStorage
from linkedin_mcp.api.v1 import mount_v1_routers
from linkedin_mcp.config import Settings, get_settings
from linkedin_mcp.integrations.oauth import UpstreamExchanger
from linkedin_mcp.security.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


def build_proxy(settings: Settings) -> OAuthProxy:
    """Construct the proxy and its stores from *settings*."""
    storage = OAuthStorage(
        transaction_ttl=settings.transaction_ttl,
        code_ttl=settings.code_ttl,
        session_ttl=settings.session_ttl,
        client_ttl=settings.client_ttl or None,
    )
    exchanger = UpstreamExchanger(
        client_id=settings.linkedin_client_id,
        client_secret=settings.linkedin_client_secret,
    )
    return OAuthProxy(
        base_url=settings.public_base_url,
        exchanger=exchanger,
        storage=storage,
        secret=settings.jwt_secret or None,
        check_pkce=settings.verify_pkce,
    )


async def cors_middleware(request: Request, call_next):
    """Answer preflights with 204 and allow any origin on every response."""
    if request.method == "OPTIONS":
        return Response(status_code=204, headers=_CORS_HEADERS)
    response = await call_next(request)
    response.headers["Access-Control-Allow-Origin"] = "*"
    return response


async def _http_exception_handler(request: Request, exc: StarletteHTTPException):
    if isinstance(exc.detail, dict):
        content = exc.detail
    elif exc.status_code == 404:
        content = {"error": "not_found"}
    else:
        content = {"error": "invalid_request", "error_description": str(exc.detail)}
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


def create_api_app(
    settings: Settings | None = None,
    proxy: OAuthProxy | None = None,
) -> FastAPI:
    """Build the OAuth proxy FastAPI application."""
    settings = settings or get_settings()
    proxy = proxy or build_proxy(settings)
    limiter = RateLimiter(rate=settings.auth_rate_per_second, capacity=settings.auth_rate_burst)
    reaper = StoreReaper(proxy.storage, interval=settings.sweep_interval, rate_limiter=limiter)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        reaper.start()
        try:
            yield
        finally:
            await reaper.stop()
            await proxy.exchanger.aclose()

    app = FastAPI(
        title="LinkedIn MCP OAuth Proxy",
        description="OAuth 2.0 authorization server fronting LinkedIn for MCP clients.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.oauth_proxy = proxy
    app.state.rate_limiter = limiter
    app.state.reaper = reaper

    app.middleware("http")(cors_middleware)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)

    mount_v1_routers(app)
    return app


async def serve_http(settings: Settings) -> None:
    """Run the OAuth app and the MCP endpoint until either server exits."""
    import uvicorn

    from linkedin_mcp.mcp.server import create_mcp_server

    proxy = build_proxy(settings)
    api_app = create_api_app(settings, proxy)
    mcp_server = create_mcp_server(settings, proxy.authenticator)
    mcp_app = mcp_server.streamable_http_app()

    bind_host = settings.host
    oauth_server = uvicorn.Server(
        uvicorn.Config(api_app, host=bind_host, port=settings.port, log_level="warning")
    )
    tool_server = uvicorn.Server(
        uvicorn.Config(mcp_app, host=bind_host, port=settings.mcp_port, log_level="warning")
    )

    logger.info("OAuth server ready at %s", settings.public_base_url)
    logger.info("MCP server ready at http://%s:%s/mcp", bind_host, settings.mcp_port)
    logger.info(
        "Discovery endpoint: %s/.well-known/oauth-authorization-server",
        settings.public_base_url,
    )

    tasks = [
        asyncio.create_task(oauth_server.serve()),
        asyncio.create_task(tool_server.serve()),
    ]
    try:
        await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
    finally:
        oauth_server.should_exit = True
        tool_server.should_exit = True
        await asyncio.gather(*tasks, return_exceptions=True)


def run_api_server(settings: Settings) -> None:
    """Blocking entry point for HTTP transport."""
    asyncio.run(serve_http(settings))
