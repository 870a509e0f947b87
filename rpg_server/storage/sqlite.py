"""SQLite persistence for characters, ranking, parties and sessions."""

from __future__ import annotations

import json
import logging
import sqlite3
from typing import Any, Iterable

from rpg_server.game.errors import StorageFailure

logger = logging.getLogger(__name__)

SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS blobs (
      collection TEXT NOT NULL,
      key TEXT NOT NULL,
      data TEXT NOT NULL,
      updated_at INTEGER NOT NULL,
      PRIMARY KEY (collection, key)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS ranking (
      username TEXT PRIMARY KEY,
      level INTEGER NOT NULL,
      power INTEGER NOT NULL,
      class TEXT NOT NULL,
      updated_at INTEGER NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS party_recruits (
      id TEXT PRIMARY KEY,
      username TEXT NOT NULL,
      class TEXT NOT NULL,
      level INTEGER NOT NULL,
      power INTEGER NOT NULL,
      message TEXT NOT NULL,
      max_members INTEGER NOT NULL,
      created_at INTEGER NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS party_requests (
      id TEXT PRIMARY KEY,
      from_user TEXT NOT NULL,
      to_user TEXT NOT NULL,
      class TEXT NOT NULL,
      level INTEGER NOT NULL,
      power INTEGER NOT NULL,
      created_at INTEGER NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS parties (
      party_id TEXT PRIMARY KEY,
      leader TEXT NOT NULL,
      data TEXT NOT NULL,
      updated_at INTEGER NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS battle_sessions (
      session_id TEXT PRIMARY KEY,
      data TEXT NOT NULL,
      created_at INTEGER NOT NULL,
      updated_at INTEGER NOT NULL
    )
    """,
)

RECRUIT_COLUMNS = ("id", "username", "class", "level", "power", "message", "max_members", "created_at")
REQUEST_COLUMNS = ("id", "from_user", "to_user", "class", "level", "power", "created_at")


class SqliteStore:
    name = "sqlite"

    def __init__(self, path: str):
        self.path = path
        self.conn: sqlite3.Connection | None = None

    def init(self) -> None:
        try:
            self.conn = sqlite3.connect(self.path, check_same_thread=False)
            self.conn.row_factory = sqlite3.Row
            with self.conn:
                for stmt in SCHEMA:
                    self.conn.execute(stmt)
        except sqlite3.Error as e:
            raise StorageFailure(f"cannot open {self.path}: {e}") from e
        logger.info("sqlite store ready at %s", self.path)

    def close(self) -> None:
        if self.conn:
            self.conn.close()
            self.conn = None

    def _write(self, sql: str, params: Iterable[Any] = ()) -> int:
        if not self.conn:
            raise StorageFailure("sqlite store is not initialized")
        try:
            with self.conn:
                cur = self.conn.execute(sql, tuple(params))
        except (sqlite3.Error, OverflowError) as e:
            raise StorageFailure(str(e)) from e
        return cur.rowcount

    def _read(self, sql: str, params: Iterable[Any] = ()) -> list[sqlite3.Row]:
        if not self.conn:
            raise StorageFailure("sqlite store is not initialized")
        try:
            return self.conn.execute(sql, tuple(params)).fetchall()
        except (sqlite3.Error, OverflowError) as e:
            raise StorageFailure(str(e)) from e

    # Blobs (characters, inventories)

    def get_blob(self, collection: str, key: str) -> dict[str, Any] | None:
        rows = self._read("SELECT key, data, updated_at FROM blobs WHERE collection = ? AND key = ?", (collection, key))
        if not rows:
            return None
        row = rows[0]
        return {"key": row["key"], "data": json.loads(row["data"]), "updated_at": row["updated_at"]}

    def put_blob(self, collection: str, key: str, data: Any, updated_at: int) -> None:
        self._write(
            "INSERT OR REPLACE INTO blobs (collection, key, data, updated_at) VALUES (?, ?, ?, ?)",
            (collection, key, json.dumps(data), int(updated_at)),
        )

    def delete_blob(self, collection: str, key: str) -> int:
        return self._write("DELETE FROM blobs WHERE collection = ? AND key = ?", (collection, key))

    # Ranking

    def upsert_ranking(self, username: str, level: int, power: int, char_class: str, updated_at: int) -> None:
        self._write(
            """
            INSERT INTO ranking (username, level, power, class, updated_at)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(username) DO UPDATE SET
              level=excluded.level,
              power=excluded.power,
              class=excluded.class,
              updated_at=excluded.updated_at
            """,
            (username, int(level), int(power), char_class, int(updated_at)),
        )

    def get_ranking(self, limit: int = 100) -> list[dict[str, Any]]:
        rows = self._read(
            "SELECT username, level, power, class, updated_at FROM ranking ORDER BY power DESC, rowid ASC LIMIT ?",
            (int(limit),),
        )
        return [dict(r) for r in rows]

    # Party recruitment posts

    def insert_recruit(self, row: dict[str, Any]) -> None:
        self._write(
            f"INSERT INTO party_recruits ({', '.join(RECRUIT_COLUMNS)}) VALUES ({', '.join('?' * len(RECRUIT_COLUMNS))})",
            (row[c] for c in RECRUIT_COLUMNS),
        )

    def get_recruit(self, recruit_id: str) -> dict[str, Any] | None:
        rows = self._read("SELECT * FROM party_recruits WHERE id = ?", (recruit_id,))
        return dict(rows[0]) if rows else None

    def list_recruits(self, since: int) -> list[dict[str, Any]]:
        rows = self._read(
            "SELECT * FROM party_recruits WHERE created_at > ? ORDER BY created_at DESC",
            (int(since),),
        )
        return [dict(r) for r in rows]

    def delete_recruits_by_user(self, username: str) -> int:
        return self._write("DELETE FROM party_recruits WHERE username = ?", (username,))

    def delete_recruit(self, recruit_id: str) -> int:
        return self._write("DELETE FROM party_recruits WHERE id = ?", (recruit_id,))

    # Party join requests

    def upsert_request(self, row: dict[str, Any]) -> None:
        self._write(
            f"INSERT OR REPLACE INTO party_requests ({', '.join(REQUEST_COLUMNS)}) "
            f"VALUES ({', '.join('?' * len(REQUEST_COLUMNS))})",
            (row[c] for c in REQUEST_COLUMNS),
        )

    def list_requests(self, to_user: str, since: int) -> list[dict[str, Any]]:
        rows = self._read(
            "SELECT * FROM party_requests WHERE to_user = ? AND created_at > ? ORDER BY created_at DESC",
            (to_user, int(since)),
        )
        return [dict(r) for r in rows]

    def delete_request(self, request_id: str) -> int:
        return self._write("DELETE FROM party_requests WHERE id = ?", (request_id,))

    # Parties

    def get_party(self, party_id: str) -> dict[str, Any] | None:
        rows = self._read("SELECT party_id, leader, data, updated_at FROM parties WHERE party_id = ?", (party_id,))
        if not rows:
            return None
        out = dict(rows[0])
        out["data"] = json.loads(out["data"])
        return out

    def put_party(self, party_id: str, leader: str, data: Any, updated_at: int) -> None:
        self._write(
            "INSERT OR REPLACE INTO parties (party_id, leader, data, updated_at) VALUES (?, ?, ?, ?)",
            (party_id, leader, json.dumps(data), int(updated_at)),
        )

    def delete_party(self, party_id: str) -> int:
        return self._write("DELETE FROM parties WHERE party_id = ?", (party_id,))

    # Battle sessions

    def get_session(self, session_id: str) -> dict[str, Any] | None:
        rows = self._read(
            "SELECT session_id, data, created_at, updated_at FROM battle_sessions WHERE session_id = ?",
            (session_id,),
        )
        if not rows:
            return None
        out = dict(rows[0])
        out["data"] = json.loads(out["data"])
        return out

    def put_session(self, session_id: str, data: Any, created_at: int, updated_at: int) -> None:
        self._write(
            "INSERT OR REPLACE INTO battle_sessions (session_id, data, created_at, updated_at) VALUES (?, ?, ?, ?)",
            (session_id, json.dumps(data), int(created_at), int(updated_at)),
        )

    def delete_sessions_before(self, cutoff: int) -> int:
        return self._write("DELETE FROM battle_sessions WHERE updated_at < ?", (int(cutoff),))
