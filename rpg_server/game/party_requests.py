"""Requests to join someone's party. Keyed by id, no per-sender limit."""

from __future__ import annotations

from typing import Any

from rpg_server.game.config import MINUTE_MS


class PartyRequests:
    def __init__(self, store, ttl_ms: int = 30 * MINUTE_MS):
        self.store = store
        self.ttl_ms = int(ttl_ms)

    def send(
        self,
        request_id: str,
        from_user: str,
        to_user: str,
        char_class: str,
        level: int,
        power: int,
        now: int,
    ) -> str:
        self.store.upsert_request(
            {
                "id": request_id,
                "from_user": from_user,
                "to_user": to_user,
                "class": char_class,
                "level": int(level),
                "power": int(power),
                "created_at": int(now),
            }
        )
        return request_id

    def list_for(self, to_user: str, now: int) -> list[dict[str, Any]]:
        return self.store.list_requests(to_user, since=int(now) - self.ttl_ms)

    def remove(self, request_id: str) -> bool:
        self.store.delete_request(request_id)
        return True
