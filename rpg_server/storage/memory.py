"""In-memory runtime state.

Same surface as SqliteStore; everything is lost on restart.
"""

from __future__ import annotations

import copy
from typing import Any

from rpg_server.game.errors import StorageFailure


class MemoryStore:
    name = "memory"

    def __init__(self):
        self._blobs: dict[str, dict[str, dict[str, Any]]] = {}
        self._ranking: dict[str, dict[str, Any]] = {}
        self._recruits: dict[str, dict[str, Any]] = {}
        self._requests: dict[str, dict[str, Any]] = {}
        self._parties: dict[str, dict[str, Any]] = {}
        self._sessions: dict[str, dict[str, Any]] = {}

    def init(self) -> None:
        pass

    def close(self) -> None:
        pass

    # Blobs (characters, inventories)

    def get_blob(self, collection: str, key: str) -> dict[str, Any] | None:
        row = self._blobs.get(collection, {}).get(key)
        return copy.deepcopy(row) if row else None

    def put_blob(self, collection: str, key: str, data: Any, updated_at: int) -> None:
        self._blobs.setdefault(collection, {})[key] = {
            "key": key,
            "data": copy.deepcopy(data),
            "updated_at": int(updated_at),
        }

    def delete_blob(self, collection: str, key: str) -> int:
        return 1 if self._blobs.get(collection, {}).pop(key, None) is not None else 0

    # Ranking

    def upsert_ranking(self, username: str, level: int, power: int, char_class: str, updated_at: int) -> None:
        self._ranking[username] = {
            "username": username,
            "level": int(level),
            "power": int(power),
            "class": char_class,
            "updated_at": int(updated_at),
        }

    def get_ranking(self, limit: int = 100) -> list[dict[str, Any]]:
        vals = list(self._ranking.values())
        vals.sort(key=lambda r: r["power"], reverse=True)
        return [dict(r) for r in vals[: int(limit)]]

    # Party recruitment posts

    def insert_recruit(self, row: dict[str, Any]) -> None:
        if row["id"] in self._recruits:
            raise StorageFailure(f"recruit id already exists: {row['id']}")
        self._recruits[row["id"]] = dict(row)

    def get_recruit(self, recruit_id: str) -> dict[str, Any] | None:
        row = self._recruits.get(recruit_id)
        return dict(row) if row else None

    def list_recruits(self, since: int) -> list[dict[str, Any]]:
        rows = [dict(r) for r in self._recruits.values() if r["created_at"] > since]
        rows.sort(key=lambda r: r["created_at"], reverse=True)
        return rows

    def delete_recruits_by_user(self, username: str) -> int:
        ids = [k for k, r in self._recruits.items() if r["username"] == username]
        for k in ids:
            del self._recruits[k]
        return len(ids)

    def delete_recruit(self, recruit_id: str) -> int:
        return 1 if self._recruits.pop(recruit_id, None) is not None else 0

    # Party join requests

    def upsert_request(self, row: dict[str, Any]) -> None:
        self._requests[row["id"]] = dict(row)

    def list_requests(self, to_user: str, since: int) -> list[dict[str, Any]]:
        rows = [dict(r) for r in self._requests.values() if r["to_user"] == to_user and r["created_at"] > since]
        rows.sort(key=lambda r: r["created_at"], reverse=True)
        return rows

    def delete_request(self, request_id: str) -> int:
        return 1 if self._requests.pop(request_id, None) is not None else 0

    # Parties

    def get_party(self, party_id: str) -> dict[str, Any] | None:
        row = self._parties.get(party_id)
        return copy.deepcopy(row) if row else None

    def put_party(self, party_id: str, leader: str, data: Any, updated_at: int) -> None:
        self._parties[party_id] = {
            "party_id": party_id,
            "leader": leader,
            "data": copy.deepcopy(data),
            "updated_at": int(updated_at),
        }

    def delete_party(self, party_id: str) -> int:
        return 1 if self._parties.pop(party_id, None) is not None else 0

    # Battle sessions

    def get_session(self, session_id: str) -> dict[str, Any] | None:
        row = self._sessions.get(session_id)
        return copy.deepcopy(row) if row else None

    def put_session(self, session_id: str, data: Any, created_at: int, updated_at: int) -> None:
        self._sessions[session_id] = {
            "session_id": session_id,
            "data": copy.deepcopy(data),
            "created_at": int(created_at),
            "updated_at": int(updated_at),
        }

    def delete_sessions_before(self, cutoff: int) -> int:
        ids = [k for k, r in self._sessions.items() if r["updated_at"] < cutoff]
        for k in ids:
            del self._sessions[k]
        return len(ids)
