"""
auth/sessions.py -- In-memory session store (token -> SessionInfo).

Pattern: Repository over a dict guarded by a single threading.Lock. FastAPI
runs sync route handlers in a threadpool, so create/resolve/invalidate can
race; every read and write of the map happens under the lock, which means a
concurrent create never loses an entry and a resolve never sees a partially
written one.

Tokens are uuid4 strings (122 random bits from os.urandom). They carry no
data -- the server-side map is the only source of truth, so a token cannot be
forged, only guessed.

Lifetime: process memory only. Restarting the server drops every session and
clients must log in again. The store is not shared across worker processes.

Expiry: ttl_seconds=0 (the default) keeps sessions for the life of the
process. A positive ttl makes resolve() treat older sessions as absent;
purge_expired() reclaims their memory and is driven by the app lifespan.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass

from auth.models import SessionInfo

logger = logging.getLogger("sessiongate.auth")


@dataclass(frozen=True)
class _Entry:
    info: SessionInfo
    created_at: float


class SessionStore:
    """Concurrency-safe mapping from session token to SessionInfo.

    Usage:
        sessions = SessionStore()
        token = sessions.create(SessionInfo(user_id="...", username="alice", email="a@x.com"))
        sessions.resolve(token)      # SessionInfo
        sessions.resolve("bogus")    # None
    """

    def __init__(self, ttl_seconds: int = 0, clock=time.monotonic) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[str, _Entry] = {}

    def create(self, info: SessionInfo) -> str:
        """Mint a fresh token bound to info and return it.

        Re-login creates a new, independent token; existing sessions for the
        same user are left alone.
        """
        with self._lock:
            token = str(uuid.uuid4())
            while token in self._entries:
                token = str(uuid.uuid4())
            self._entries[token] = _Entry(info=info, created_at=self._clock())
        logger.debug("Session %s... created for %r", token[:8], info.username)
        return token

    def resolve(self, token: str | None) -> SessionInfo | None:
        """Return the SessionInfo bound to token, or None if unknown or expired."""
        if not token:
            return None
        with self._lock:
            entry = self._entries.get(token)
        if entry is None or self._expired(entry):
            return None
        return entry.info

    def invalidate(self, token: str) -> bool:
        """Drop a session. Returns True if the token was live."""
        with self._lock:
            return self._entries.pop(token, None) is not None

    def purge_expired(self) -> int:
        """Delete sessions older than ttl_seconds. Returns number of sessions removed."""
        if self.ttl_seconds <= 0:
            return 0
        with self._lock:
            stale = [token for token, entry in self._entries.items() if self._expired(entry)]
            for token in stale:
                del self._entries[token]
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _expired(self, entry: _Entry) -> bool:
        return self.ttl_seconds > 0 and self._clock() - entry.created_at >= self.ttl_seconds
