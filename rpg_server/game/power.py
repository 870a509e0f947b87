"""Power score derived from a character sheet."""

from __future__ import annotations

import math
from typing import Any

BASE_STAT = 10.0

HP_WEIGHT = 0.5
ATTACK_WEIGHT = 3.0
DEFENSE_WEIGHT = 2.0
SPEED_WEIGHT = 1.5

# SQLite INTEGER range; every stored int is kept inside it.
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def clamp_int64(v: int) -> int:
    return max(INT64_MIN, min(INT64_MAX, int(v)))


def _stat(v: Any, default: float) -> float:
    # Falsy values (0 included) fall back to the default.
    if not v:
        return default
    try:
        f = float(v)
    except (TypeError, ValueError, OverflowError):
        return default
    if not math.isfinite(f):
        return default
    return f


def compute_power(character: Any) -> int:
    if not isinstance(character, dict):
        return 0

    atk = _stat(character.get("attack"), BASE_STAT)
    dfn = _stat(character.get("defense"), BASE_STAT)
    spd = _stat(character.get("speed"), BASE_STAT)

    equipment = character.get("equipment")
    if isinstance(equipment, list):
        for item in equipment:
            if not isinstance(item, dict):
                continue
            atk += _stat(item.get("attack"), 0.0)
            dfn += _stat(item.get("defense"), 0.0)
            spd += _stat(item.get("speed"), 0.0)

    max_hp = _stat(character.get("maxHp"), 0.0)
    total = max_hp * HP_WEIGHT + atk * ATTACK_WEIGHT + dfn * DEFENSE_WEIGHT + spd * SPEED_WEIGHT
    if math.isnan(total):
        return 0
    if total >= INT64_MAX:
        return INT64_MAX
    if total <= INT64_MIN:
        return INT64_MIN
    return int(math.floor(total))
