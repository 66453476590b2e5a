"""MCP tool server.

Tools resolve the caller's LinkedIn credentials per call: over HTTP from the
``Authorization`` header via the ToolAuthenticator, over stdio from a static
``LINKEDIN_ACCESS_TOKEN`` if one is configured. Tools that need an identity
reject unauthenticated calls themselves; ``test_connection`` does not.

Created: 2026-10-12
"""

import logging
from typing import Any

from mcp.server.fastmcp import Context, FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from starlette.requests import Request
from starlette.responses import JSONResponse

from linkedin_mcp.api.oauth2.models import LINKEDIN_SCOPES, UpstreamCredentials
from linkedin_mcp.config import Settings
from linkedin_mcp.integrations.linkedin import LinkedInAPIError, LinkedInClient, format_profile
from linkedin_mcp.mcp.auth import ToolAuthenticator

logger = logging.getLogger(__name__)

INSTRUCTIONS = """LinkedIn MCP Server with automatic OAuth authentication.
Connect via HTTP and the server will guide you through LinkedIn OAuth automatically."""


def resolve_credentials(
    request: Any,
    authenticator: ToolAuthenticator | None,
    settings: Settings,
) -> UpstreamCredentials | None:
    """Credentials for the current tool call, or None if unauthenticated."""
    if request is not None:
        if authenticator is None:
            return None
        return authenticator.authenticate(request.headers.get("authorization"))

    if settings.linkedin_access_token:
        return UpstreamCredentials(
            access_token=settings.linkedin_access_token,
            scopes=list(LINKEDIN_SCOPES),
        )
    return None


def protected_resource_metadata(settings: Settings) -> dict[str, Any]:
    """OAuth protected resource metadata (RFC 9728) pointing at the proxy."""
    return {
        "resource": settings.mcp_url,
        "authorization_servers": [settings.public_base_url],
        "scopes_supported": list(LINKEDIN_SCOPES),
        "bearer_methods_supported": ["header"],
    }


def connection_status(credentials: UpstreamCredentials | None) -> str:
    status = "✅ Authenticated" if credentials else "❌ Not authenticated"
    scopes = credentials.scopes if credentials and credentials.scopes else LINKEDIN_SCOPES
    return f"LinkedIn MCP Server\n- Status: {status}\n- Scopes: {', '.join(scopes)}"


def create_mcp_server(
    settings: Settings,
    authenticator: ToolAuthenticator | None = None,
) -> FastMCP:
    """Build the FastMCP server with its tools registered."""
    mcp = FastMCP(
        "linkedin-api-mcp-server",
        instructions=INSTRUCTIONS,
        host=settings.host,
        port=settings.mcp_port,
    )

    # Discovery only: tool calls are not gated here, each tool checks credentials itself
    @mcp.custom_route("/.well-known/oauth-protected-resource", methods=["GET"])
    async def protected_resource(request: Request) -> JSONResponse:
        return JSONResponse(protected_resource_metadata(settings))

    def _credentials(ctx: Context) -> UpstreamCredentials | None:
        request = getattr(ctx.request_context, "request", None)
        return resolve_credentials(request, authenticator, settings)

    @mcp.tool()
    async def test_connection(ctx: Context) -> str:
        """Test the LinkedIn MCP Server connection."""
        return connection_status(_credentials(ctx))

    @mcp.tool()
    async def get_my_profile(ctx: Context) -> str:
        """Get the authenticated user's LinkedIn profile."""
        credentials = _credentials(ctx)
        if credentials is None:
            raise ToolError("Not authenticated")

        try:
            async with LinkedInClient(credentials, user_agent=settings.linkedin_user_agent) as client:
                profile = await client.get_current_user_profile()
        except LinkedInAPIError as e:
            logger.warning("Profile lookup failed: %s", e)
            raise ToolError(str(e)) from e
        return format_profile(profile)

    return mcp
