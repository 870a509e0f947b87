"""Request body schemas + validation.

Bodies are client JSON. Only ids and usernames are required; numeric fields
are coerced leniently and never rejected.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from rpg_server.game.power import clamp_int64


class ProtocolError(Exception):
    pass


def _int(v: Any, *, default: int = 0) -> int:
    try:
        return clamp_int64(v)
    except Exception:
        return default


def _str(v: Any, *, default: str = "") -> str:
    if isinstance(v, str):
        return v
    if v is None:
        return default
    return str(v)


def _key(data: dict[str, Any], name: str) -> str:
    # Clients commonly send numeric ids (e.g. Date.now()).
    v = data.get(name)
    if isinstance(v, bool) or not isinstance(v, (str, int)):
        raise ProtocolError(f"{name} required")
    v = str(v)
    if not v:
        raise ProtocolError(f"{name} required")
    return v


def require_object(body: Any) -> dict[str, Any]:
    if not isinstance(body, dict):
        raise ProtocolError("body must be object")
    return body


@dataclass
class RecruitPost:
    id: str
    username: str
    charClass: str
    level: int
    power: int
    message: str
    maxMembers: int

    @classmethod
    def parse(cls, data: dict[str, Any]) -> "RecruitPost":
        return cls(
            id=_key(data, "id"),
            username=_key(data, "username"),
            charClass=_str(data.get("class")),
            level=_int(data.get("level")),
            power=_int(data.get("power")),
            message=_str(data.get("message")),
            maxMembers=_int(data.get("maxMembers")),
        )


@dataclass
class PartyRequestBody:
    id: str
    fromUser: str
    toUser: str
    charClass: str
    level: int
    power: int

    @classmethod
    def parse(cls, data: dict[str, Any]) -> "PartyRequestBody":
        return cls(
            id=_key(data, "id"),
            fromUser=_key(data, "fromUser"),
            toUser=_key(data, "toUser"),
            charClass=_str(data.get("class")),
            level=_int(data.get("level")),
            power=_int(data.get("power")),
        )


@dataclass
class PartyBody:
    leader: str
    data: dict[str, Any]

    @classmethod
    def parse(cls, data: dict[str, Any]) -> "PartyBody":
        return cls(leader=_str(data.get("leader")), data=data)


@dataclass
class InventoryBody:
    items: list[Any]

    @classmethod
    def parse(cls, data: dict[str, Any]) -> "InventoryBody":
        items = data.get("items")
        if items is None:
            items = []
        if not isinstance(items, list):
            raise ProtocolError("items must be array")
        return cls(items=items)
