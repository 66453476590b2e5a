# Shared fixtures for the OAuth proxy tests.
# Created: 2026-10-12

import time
from unittest.mock import AsyncMock

import pytest

from linkedin_mcp.api.oauth2.models import UpstreamCredentials
from linkedin_mcp.api.oauth2.server import OAuthProxy
from linkedin_mcp.api.oauth2.storage import OAuthStorage
from linkedin_mcp.config import Settings
from linkedin_mcp.integrations.oauth import UpstreamExchanger

TEST_SECRET = "test-signing-secret"
BASE_URL = "http://testserver"


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def upstream_bundle():
    return UpstreamCredentials(
        access_token="li-access-123",
        refresh_token="li-refresh-456",
        expires_at=time.time() + 5184000,
        scopes=["openid", "profile", "email", "w_member_social"],
    )


@pytest.fixture
def exchanger(upstream_bundle):
    ex = UpstreamExchanger(client_id="li-client", client_secret="li-secret")
    ex.exchange_code = AsyncMock(return_value=upstream_bundle)
    return ex


@pytest.fixture
def storage():
    return OAuthStorage()


@pytest.fixture
def proxy(exchanger, storage):
    return OAuthProxy(
        base_url=BASE_URL,
        exchanger=exchanger,
        storage=storage,
        secret=TEST_SECRET,
    )


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        linkedin_client_id="li-client",
        linkedin_client_secret="li-secret",
        base_url=BASE_URL,
        jwt_secret=TEST_SECRET,
        linkedin_access_token="",
        auth_rate_per_second=100.0,
        auth_rate_burst=100,
    )
