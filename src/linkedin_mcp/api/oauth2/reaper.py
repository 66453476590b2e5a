# Background Reaper: periodic TTL sweep of the OAuth stores.
# Created: 2026-10-12

from __future__ import annotations

import asyncio
import logging

from linkedin_mcp.api.oauth2.storage import OAuthStorage
from linkedin_mcp.security.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

SWEEP_INTERVAL = 60.0


class StoreReaper:
    """Sweeps expired entries every *interval* seconds.

    Owned by the application lifespan: ``start()`` on startup, ``stop()`` on
    shutdown so no task outlives the app (or a test).
    """

    def __init__(
        self,
        storage: OAuthStorage,
        interval: float = SWEEP_INTERVAL,
        rate_limiter: RateLimiter | None = None,
    ):
        self.storage = storage
        self.interval = interval
        self.rate_limiter = rate_limiter
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop())
        logger.debug("Store reaper started (every %ss)", self.interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.debug("Store reaper stopped")

    def run_once(self) -> dict[str, int]:
        """Sweep all stores now. Returns removal counts per store."""
        removed = self.storage.sweep_expired()
        if self.rate_limiter is not None:
            self.rate_limiter.cleanup()
        if any(removed.values()):
            logger.debug("Swept expired entries: %s", removed)
        return removed

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                self.run_once()
            except Exception:
                logger.warning("Store sweep failed", exc_info=True)
