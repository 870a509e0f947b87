"""Cooperative battle sessions.

Sessions never expire on read. `purge_expired` is the only thing that deletes
stale ones and it has to be triggered from outside (cleanup endpoint or
tools/purge_sessions.py).
"""

from __future__ import annotations

import logging
from typing import Any

from rpg_server.game.config import MINUTE_MS
from rpg_server.game.errors import NotFound

logger = logging.getLogger(__name__)


class BattleSessions:
    def __init__(self, store, ttl_ms: int = 60 * MINUTE_MS):
        self.store = store
        self.ttl_ms = int(ttl_ms)

    def save(self, session_id: str, payload: Any, now: int) -> dict[str, int]:
        existing = self.store.get_session(session_id)
        created_at = existing["created_at"] if existing else int(now)
        self.store.put_session(session_id, payload, created_at, int(now))
        return {"created_at": created_at, "updated_at": int(now)}

    def get(self, session_id: str) -> dict[str, Any]:
        row = self.store.get_session(session_id)
        if row is None:
            raise NotFound("battle session", session_id)
        return row

    def purge_expired(self, now: int) -> int:
        deleted = self.store.delete_sessions_before(int(now) - self.ttl_ms)
        if deleted:
            logger.info("purged %d expired battle session(s)", deleted)
        return deleted
