# Tests for the background store reaper
# Created: 2026-10-12

import asyncio
from unittest.mock import MagicMock

from linkedin_mcp.api.oauth2.models import Transaction
from linkedin_mcp.api.oauth2.reaper import StoreReaper
from linkedin_mcp.api.oauth2.storage import OAuthStorage
from linkedin_mcp.security.rate_limiter import RateLimiter


def _txn() -> Transaction:
    return Transaction(client_id="abc", redirect_uri="https://app/cb", state="xyz")


class TestRunOnce:
    def test_sweeps_expired(self, clock):
        storage = OAuthStorage(clock=clock)
        storage.transactions.put("old", _txn())
        clock.advance(601)
        storage.transactions.put("new", _txn())

        removed = StoreReaper(storage).run_once()

        assert removed == {"transactions": 1, "codes": 0, "sessions": 0, "clients": 0}
        assert len(storage.transactions) == 1

    def test_cleans_rate_limiter(self, clock):
        limiter = MagicMock(spec=RateLimiter)
        StoreReaper(OAuthStorage(clock=clock), rate_limiter=limiter).run_once()
        limiter.cleanup.assert_called_once()


class TestLifecycle:
    async def test_start_stop(self):
        reaper = StoreReaper(OAuthStorage(), interval=3600)
        assert not reaper.running
        reaper.start()
        assert reaper.running
        await reaper.stop()
        assert not reaper.running

    async def test_start_is_idempotent(self):
        reaper = StoreReaper(OAuthStorage(), interval=3600)
        reaper.start()
        task = reaper._task
        reaper.start()
        assert reaper._task is task
        await reaper.stop()

    async def test_stop_without_start(self):
        await StoreReaper(OAuthStorage()).stop()

    async def test_loop_sweeps_periodically(self, clock):
        storage = OAuthStorage(clock=clock)
        storage.transactions.put("old", _txn())
        clock.advance(601)

        reaper = StoreReaper(storage, interval=0.01)
        reaper.start()
        await asyncio.sleep(0.1)
        await reaper.stop()

        assert len(storage.transactions) == 0

    async def test_loop_survives_sweep_errors(self):
        storage = MagicMock(spec=OAuthStorage)
        storage.sweep_expired.side_effect = RuntimeError("boom")

        reaper = StoreReaper(storage, interval=0.01)
        reaper.start()
        await asyncio.sleep(0.1)
        assert reaper.running
        await reaper.stop()
        assert storage.sweep_expired.call_count >= 2
