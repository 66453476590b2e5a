# Tests for per-call tool authentication and the MCP tool layer
# Created: 2026-10-12

from types import SimpleNamespace
from unittest.mock import AsyncMock

import httpx
import pytest

from linkedin_mcp.api.oauth2.models import SessionRecord
from linkedin_mcp.api.oauth2.storage import TTLStore
from linkedin_mcp.integrations.linkedin import LinkedInAPIError, LinkedInClient, format_profile
from linkedin_mcp.mcp.auth import ToolAuthenticator
from linkedin_mcp.mcp.server import connection_status, create_mcp_server, resolve_credentials
from linkedin_mcp.security.session_tokens import create_session_token

from .conftest import TEST_SECRET


@pytest.fixture
def sessions(clock):
    return TTLStore("sessions", ttl=3600, clock=clock)


@pytest.fixture
def authenticator(sessions):
    return ToolAuthenticator(TEST_SECRET, sessions)


def _token_for(sessions, credentials, subject="subject-1", secret=TEST_SECRET, **kwargs):
    sessions.put(subject, SessionRecord(credentials=credentials))
    return create_session_token(secret, {"sub": subject}, **kwargs)


class TestToolAuthenticator:
    def test_valid_token(self, authenticator, sessions, upstream_bundle):
        token = _token_for(sessions, upstream_bundle)
        assert authenticator.authenticate(f"Bearer {token}") == upstream_bundle

    def test_scheme_case_insensitive(self, authenticator, sessions, upstream_bundle):
        token = _token_for(sessions, upstream_bundle)
        assert authenticator.authenticate(f"bearer {token}") == upstream_bundle

    @pytest.mark.parametrize("header", [None, "", "Bearer", "Bearer ", "Basic abc", "token"])
    def test_missing_or_malformed_header(self, authenticator, header):
        assert authenticator.authenticate(header) is None

    def test_garbage_token(self, authenticator):
        assert authenticator.authenticate("Bearer not.a.jwt") is None

    def test_wrong_secret(self, authenticator, sessions, upstream_bundle):
        token = _token_for(sessions, upstream_bundle, secret="someone-else")
        assert authenticator.authenticate(f"Bearer {token}") is None

    def test_expired_token(self, authenticator, sessions, upstream_bundle):
        token = _token_for(sessions, upstream_bundle, ttl_seconds=60, now=1000)
        assert authenticator.authenticate(f"Bearer {token}") is None

    def test_valid_token_without_session(self, authenticator):
        token = create_session_token(TEST_SECRET, {"sub": "unknown"})
        assert authenticator.authenticate(f"Bearer {token}") is None

    def test_session_expired(self, authenticator, sessions, upstream_bundle, clock):
        token = _token_for(sessions, upstream_bundle)
        clock.advance(3601)
        assert authenticator.authenticate(f"Bearer {token}") is None

    def test_token_without_subject(self, authenticator):
        token = create_session_token(TEST_SECRET, {"scope": "openid"})
        assert authenticator.authenticate(f"Bearer {token}") is None


class TestResolveCredentials:
    def test_http_request_uses_header(self, authenticator, sessions, upstream_bundle, settings):
        token = _token_for(sessions, upstream_bundle)
        request = SimpleNamespace(headers={"authorization": f"Bearer {token}"})
        assert resolve_credentials(request, authenticator, settings) == upstream_bundle

    def test_http_request_without_header(self, authenticator, settings):
        request = SimpleNamespace(headers={})
        assert resolve_credentials(request, authenticator, settings) is None

    def test_http_request_ignores_static_token(self, authenticator, settings):
        settings = settings.model_copy(update={"linkedin_access_token": "static"})
        request = SimpleNamespace(headers={})
        assert resolve_credentials(request, authenticator, settings) is None

    def test_stdio_static_token(self, settings):
        settings = settings.model_copy(update={"linkedin_access_token": "static"})
        creds = resolve_credentials(None, None, settings)
        assert creds.access_token == "static"

    def test_stdio_without_token(self, settings):
        assert resolve_credentials(None, None, settings) is None


class TestConnectionStatus:
    def test_authenticated(self, upstream_bundle):
        text = connection_status(upstream_bundle)
        assert "✅ Authenticated" in text
        assert "openid, profile, email, w_member_social" in text

    def test_not_authenticated(self):
        text = connection_status(None)
        assert text.startswith("LinkedIn MCP Server")
        assert "❌ Not authenticated" in text


class TestMCPServer:
    async def test_tools_registered(self, settings, authenticator):
        mcp = create_mcp_server(settings, authenticator)
        names = {tool.name for tool in await mcp.list_tools()}
        assert names == {"test_connection", "get_my_profile"}

    def test_served_next_to_oauth(self, settings):
        mcp = create_mcp_server(settings)
        assert mcp.settings.port == settings.port + 1


class TestLinkedInClient:
    async def test_profile(self, upstream_bundle):
        http = AsyncMock(spec=httpx.AsyncClient)
        http.get.return_value = httpx.Response(200, json={"sub": "m1", "name": "Ada Lovelace"})
        client = LinkedInClient(upstream_bundle, user_agent="test-agent", http_client=http)

        profile = await client.get_current_user_profile()

        assert profile["name"] == "Ada Lovelace"
        assert http.get.call_args.args[0] == "/userinfo"
        headers = http.get.call_args.kwargs["headers"]
        assert headers["Authorization"] == "Bearer li-access-123"
        assert headers["User-Agent"] == "test-agent"

    async def test_api_error(self, upstream_bundle):
        http = AsyncMock(spec=httpx.AsyncClient)
        http.get.return_value = httpx.Response(401, json={"message": "Invalid access token"})
        client = LinkedInClient(upstream_bundle, http_client=http)

        with pytest.raises(LinkedInAPIError) as info:
            await client.get_current_user_profile()
        assert info.value.status_code == 401
        assert "Invalid access token" in str(info.value)

    async def test_injected_client_left_open(self, upstream_bundle):
        http = AsyncMock(spec=httpx.AsyncClient)
        async with LinkedInClient(upstream_bundle, http_client=http):
            pass
        http.aclose.assert_not_called()


class TestFormatProfile:
    def test_full_profile(self):
        text = format_profile(
            {
                "sub": "m1",
                "given_name": "Ada",
                "family_name": "Lovelace",
                "email": "ada@example.com",
                "email_verified": True,
                "locale": {"language": "en", "country": "GB"},
            }
        )
        assert text.splitlines()[0] == "## Ada Lovelace"
        assert "- Email: ada@example.com (verified)" in text
        assert "- Locale: en_GB" in text
        assert "- Member ID: m1" in text

    def test_empty_profile(self):
        assert format_profile({}) == "## Unknown member"
