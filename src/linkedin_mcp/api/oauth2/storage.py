# OAuth proxy storage.
# Created: 2026-10-12
#
# In-memory, process-wide stores. Nothing is persisted: a restart drops
# pending transactions, issued codes and sessions, and downstream clients
# simply re-authenticate.

from __future__ import annotations

import logging
import secrets
import time
from collections.abc import Callable
from typing import Generic, TypeVar

from linkedin_mcp.api.oauth2.models import (
    AuthorizationCode,
    RegisteredClient,
    SessionRecord,
    Transaction,
)

logger = logging.getLogger(__name__)

V = TypeVar("V")

# Default lifetimes, in seconds
TRANSACTION_TTL = 600
CODE_TTL = 300
SESSION_TTL = 3600


def new_identifier(nbytes: int = 32) -> str:
    """Return an unguessable URL-safe identifier (*nbytes* of entropy)."""
    return secrets.token_urlsafe(nbytes)


class TTLStore(Generic[V]):
    """Keyed mapping whose entries expire *ttl* seconds after insertion.

    Expired entries read as absent straight away; ``sweep_expired()`` frees
    their memory. A ``ttl`` of ``None`` keeps entries until deleted.
    """

    def __init__(
        self,
        name: str,
        ttl: float | None,
        clock: Callable[[], float] = time.time,
    ):
        self.name = name
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, tuple[float, V]] = {}

    def _expired(self, inserted_at: float, now: float) -> bool:
        return self.ttl is not None and (now - inserted_at) > self.ttl

    def put(self, key: str, value: V) -> None:
        self._entries[key] = (self._clock(), value)

    def get(self, key: str) -> V | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        inserted_at, value = entry
        if self._expired(inserted_at, self._clock()):
            del self._entries[key]
            return None
        return value

    def pop(self, key: str) -> V | None:
        """Remove and return a live entry."""
        value = self.get(key)
        if value is not None:
            del self._entries[key]
        return value

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def sweep_expired(self, now: float | None = None) -> int:
        """Drop every entry older than the TTL. Returns the count removed."""
        if self.ttl is None:
            return 0
        now = self._clock() if now is None else now
        stale = [k for k, (inserted_at, _) in self._entries.items() if self._expired(inserted_at, now)]
        for k in stale:
            del self._entries[k]
        return len(stale)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key) is not None

    def __len__(self) -> int:
        return len(self._entries)


class OAuthStorage:
    """The four stores the proxy works with, one namespace each.

    Registered clients have no TTL unless *client_ttl* is given; they are
    kept for the lifetime of the process.
    """

    def __init__(
        self,
        transaction_ttl: float = TRANSACTION_TTL,
        code_ttl: float = CODE_TTL,
        session_ttl: float = SESSION_TTL,
        client_ttl: float | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.transactions: TTLStore[Transaction] = TTLStore("transactions", transaction_ttl, clock)
        self.codes: TTLStore[AuthorizationCode] = TTLStore("codes", code_ttl, clock)
        self.sessions: TTLStore[SessionRecord] = TTLStore("sessions", session_ttl, clock)
        self.clients: TTLStore[RegisteredClient] = TTLStore("clients", client_ttl, clock)

    def _stores(self) -> list[TTLStore]:
        return [self.transactions, self.codes, self.sessions, self.clients]

    def sweep_expired(self, now: float | None = None) -> dict[str, int]:
        """Sweep every store. Returns removal counts keyed by store name."""
        return {store.name: store.sweep_expired(now) for store in self._stores()}
