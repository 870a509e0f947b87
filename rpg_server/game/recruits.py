"""Party recruitment board.

One live post per username. Posts older than the TTL are hidden from the
listing but stay in storage; only an explicit remove or a newer post from the
same user deletes them.
"""

from __future__ import annotations

import logging
from typing import Any

from rpg_server.game.config import MINUTE_MS
from rpg_server.game.errors import NotFound

logger = logging.getLogger(__name__)


class RecruitmentBoard:
    def __init__(self, store, ttl_ms: int = 30 * MINUTE_MS):
        self.store = store
        self.ttl_ms = int(ttl_ms)

    def publish(
        self,
        recruit_id: str,
        username: str,
        char_class: str,
        level: int,
        power: int,
        message: str,
        max_members: int,
        now: int,
    ) -> str:
        replaced = self.store.delete_recruits_by_user(username)
        if replaced:
            logger.debug("replaced %d recruit post(s) for %s", replaced, username)
        self.store.insert_recruit(
            {
                "id": recruit_id,
                "username": username,
                "class": char_class,
                "level": int(level),
                "power": int(power),
                "message": message,
                "max_members": int(max_members),
                "created_at": int(now),
            }
        )
        return recruit_id

    def list_visible(self, now: int) -> list[dict[str, Any]]:
        return self.store.list_recruits(since=int(now) - self.ttl_ms)

    def get(self, recruit_id: str) -> dict[str, Any]:
        # Not TTL filtered.
        row = self.store.get_recruit(recruit_id)
        if row is None:
            raise NotFound("recruit", recruit_id)
        return row

    def remove(self, recruit_id: str) -> bool:
        self.store.delete_recruit(recruit_id)
        return True
