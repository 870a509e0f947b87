"""Character sheets, inventories and the power ranking derived from them.

A character save is two independent writes: the sheet itself, then the
ranking row. If the second one fails the sheet stays saved and the ranking
keeps its previous values until the next successful save.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from rpg_server.game.errors import NotFound, StorageFailure
from rpg_server.game.power import clamp_int64, compute_power

logger = logging.getLogger(__name__)

CHARACTERS = "character"
INVENTORIES = "inventory"


class RankingIndex:
    def __init__(self, store):
        self.store = store

    def upsert(self, username: str, level: int, char_class: str, power: int, timestamp: int) -> None:
        self.store.upsert_ranking(username, level, power, char_class, timestamp)

    def top_n(self, n: int) -> list[dict[str, Any]]:
        return self.store.get_ranking(limit=max(0, int(n)))


@dataclass
class CharacterSaveResult:
    updated_at: int
    power: int
    ranked: bool


def _level(sheet: dict[str, Any]) -> int:
    try:
        return clamp_int64(sheet.get("level") or 0)
    except (TypeError, ValueError, OverflowError):
        return 0


def _class(sheet: dict[str, Any]) -> str:
    v = sheet.get("class")
    return v if isinstance(v, str) else ("" if v is None else str(v))


class CharacterStore:
    def __init__(self, store, ranking: RankingIndex):
        self.store = store
        self.ranking = ranking

    def get(self, username: str) -> dict[str, Any]:
        row = self.store.get_blob(CHARACTERS, username)
        if row is None:
            raise NotFound("character", username)
        return {"username": username, "data": row["data"], "updated_at": row["updated_at"]}

    def save(self, username: str, sheet: dict[str, Any], now: int) -> CharacterSaveResult:
        self.store.put_blob(CHARACTERS, username, sheet, now)

        power = compute_power(sheet)
        try:
            self.ranking.upsert(username, _level(sheet), _class(sheet), power, now)
        except StorageFailure:
            logger.exception("ranking update failed for %s; character save kept", username)
            return CharacterSaveResult(updated_at=now, power=power, ranked=False)
        return CharacterSaveResult(updated_at=now, power=power, ranked=True)


class InventoryStore:
    def __init__(self, store):
        self.store = store

    def get(self, username: str) -> dict[str, Any]:
        row = self.store.get_blob(INVENTORIES, username)
        if row is None:
            return {"items": []}
        return {"items": row["data"], "updated_at": row["updated_at"]}

    def save(self, username: str, items: list[Any], now: int) -> int:
        self.store.put_blob(INVENTORIES, username, items, now)
        return now
