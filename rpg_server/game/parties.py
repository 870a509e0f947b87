"""Party rosters. No TTL, they live until deleted."""

from __future__ import annotations

from typing import Any

from rpg_server.game.errors import NotFound


class PartyStore:
    def __init__(self, store):
        self.store = store

    def save(self, party_id: str, leader: str, payload: Any, now: int) -> int:
        self.store.put_party(party_id, leader, payload, int(now))
        return int(now)

    def get(self, party_id: str) -> dict[str, Any]:
        row = self.store.get_party(party_id)
        if row is None:
            raise NotFound("party", party_id)
        return row

    def remove(self, party_id: str) -> bool:
        self.store.delete_party(party_id)
        return True
