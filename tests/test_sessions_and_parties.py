from __future__ import annotations

import pytest

from rpg_server.game.errors import NotFound
from rpg_server.game.parties import PartyStore
from rpg_server.game.sessions import BattleSessions

MIN = 60_000
T0 = 1_700_000_000_000


def test_session_keeps_created_at_across_saves(store):
    sessions = BattleSessions(store)
    assert sessions.save("s1", {"turn": 1}, T0) == {"created_at": T0, "updated_at": T0}
    assert sessions.save("s1", {"turn": 2}, T0 + 5 * MIN) == {"created_at": T0, "updated_at": T0 + 5 * MIN}

    got = sessions.get("s1")
    assert got["created_at"] == T0
    assert got["updated_at"] == T0 + 5 * MIN
    assert got["data"] == {"turn": 2}


def test_session_payload_is_replaced_not_merged(store):
    sessions = BattleSessions(store)
    sessions.save("s1", {"turn": 1, "boss": {"hp": 900}}, T0)
    sessions.save("s1", {"turn": 2}, T0 + 1)
    assert sessions.get("s1")["data"] == {"turn": 2}


def test_missing_session_is_not_found(store):
    with pytest.raises(NotFound):
        BattleSessions(store).get("nope")


def test_purge_removes_stale_sessions_once(store):
    sessions = BattleSessions(store)
    sessions.save("old", {}, T0)
    sessions.save("fresh", {}, T0 + 30 * MIN)

    assert sessions.purge_expired(T0 + 61 * MIN) == 1
    assert sessions.purge_expired(T0 + 61 * MIN) == 0
    with pytest.raises(NotFound):
        sessions.get("old")
    assert sessions.get("fresh")["created_at"] == T0 + 30 * MIN


def test_get_does_not_purge(store):
    sessions = BattleSessions(store)
    sessions.save("s1", {"turn": 9}, T0)
    # Long past the TTL, still readable until someone runs the sweep.
    assert sessions.get("s1")["data"] == {"turn": 9}
    sessions.save("s1", {"turn": 10}, T0 + 3 * 60 * MIN)
    assert sessions.purge_expired(T0 + 3 * 60 * MIN + 1) == 0


def test_recent_update_protects_old_session(store):
    sessions = BattleSessions(store)
    sessions.save("s1", {}, T0)
    sessions.save("s1", {}, T0 + 50 * MIN)
    assert sessions.purge_expired(T0 + 61 * MIN) == 0


def test_party_round_trip_and_idempotent_delete(store):
    parties = PartyStore(store)
    roster = {"leader": "bob", "members": ["bob", "amy"]}
    assert parties.save("p1", "bob", roster, T0) == T0

    got = parties.get("p1")
    assert got == {"party_id": "p1", "leader": "bob", "data": roster, "updated_at": T0}

    assert parties.remove("p1") is True
    assert parties.remove("p1") is True
    with pytest.raises(NotFound):
        parties.get("p1")
