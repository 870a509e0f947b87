from __future__ import annotations

import pytest

from rpg_server.game.config import ServerConfig
from rpg_server.game.sessions import BattleSessions
from rpg_server.net import protocol
from rpg_server.storage.sqlite import SqliteStore
from tools import purge_sessions

MIN = 60_000
T0 = 1_700_000_000_000


def test_defaults():
    cfg = ServerConfig()
    assert cfg.port == 3000
    assert cfg.recruit_ttl_ms == 30 * MIN
    assert cfg.request_ttl_ms == 30 * MIN
    assert cfg.session_ttl_ms == 60 * MIN
    assert cfg.ranking_limit == 100


def test_from_env(monkeypatch):
    monkeypatch.setenv("RPG_PORT", "8080")
    monkeypatch.setenv("RPG_SQLITE", "off")
    monkeypatch.setenv("RPG_CORS_ALLOW_ALL", "false")
    monkeypatch.setenv("RPG_CORS_ORIGINS", "http://a.example, http://b.example,")
    monkeypatch.setenv("RPG_RANKING_LIMIT", "25")
    monkeypatch.setenv("RPG_LOG_LEVEL", "debug")

    cfg = ServerConfig.from_env()
    assert cfg.port == 8080
    assert cfg.sqlite_enabled is False
    assert cfg.cors_allow_all is False
    assert cfg.cors_allowed_origins == ["http://a.example", "http://b.example"]
    assert cfg.ranking_limit == 25
    assert cfg.log_level == "DEBUG"


def test_from_env_falls_back_on_bad_ints(monkeypatch):
    monkeypatch.delenv("RPG_PORT", raising=False)
    monkeypatch.setenv("PORT", "9000")
    monkeypatch.setenv("RPG_RANKING_LIMIT", "lots")
    cfg = ServerConfig.from_env()
    assert cfg.port == 9000
    assert cfg.ranking_limit == 100


def test_recruit_post_coerces_numbers():
    p = protocol.RecruitPost.parse({"id": "r1", "username": "bob", "level": "12", "power": None})
    assert p.level == 12
    assert p.power == 0
    assert p.charClass == ""
    assert p.maxMembers == 0


def test_party_request_needs_both_users():
    with pytest.raises(protocol.ProtocolError):
        protocol.PartyRequestBody.parse({"id": "q1", "fromUser": "amy"})


def test_inventory_items_must_be_array():
    assert protocol.InventoryBody.parse({}).items == []
    with pytest.raises(protocol.ProtocolError):
        protocol.InventoryBody.parse({"items": "sword"})


def test_purge_tool(tmp_path, capsys, monkeypatch):
    monkeypatch.setattr(purge_sessions, "configure_logging", lambda level: None)
    path = str(tmp_path / "rpg.sqlite3")
    store = SqliteStore(path)
    store.init()
    sessions = BattleSessions(store)
    sessions.save("old", {}, T0)
    sessions.save("new", {}, T0 + 59 * MIN)
    store.close()

    rc = purge_sessions.main(["--db", path, "--now-ms", str(T0 + 61 * MIN)])
    assert rc == 0
    assert "Deleted 1 session(s)" in capsys.readouterr().out

    store = SqliteStore(path)
    store.init()
    try:
        assert store.get_session("old") is None
        assert store.get_session("new") is not None
    finally:
        store.close()


def test_purge_tool_missing_db(tmp_path, monkeypatch):
    monkeypatch.setattr(purge_sessions, "configure_logging", lambda level: None)
    assert purge_sessions.main(["--db", str(tmp_path / "nope.sqlite3")]) == 1
