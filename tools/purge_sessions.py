"""One-shot sweep of stale battle sessions in the SQLite store.

Meant for cron or any other external scheduler; the server itself never
purges on its own.

  python tools/purge_sessions.py --db rpg.sqlite3
  python tools/purge_sessions.py --db rpg.sqlite3 --ttl-min 120
"""

from __future__ import annotations

import argparse
import os
import time

from rpg_server.game.config import MINUTE_MS, ServerConfig
from rpg_server.game.sessions import BattleSessions
from rpg_server.net.logs import configure_logging
from rpg_server.storage.sqlite import SqliteStore


def main(argv: list[str] | None = None) -> int:
    cfg = ServerConfig.from_env()
    ap = argparse.ArgumentParser()
    ap.add_argument("--db", default=cfg.sqlite_path)
    ap.add_argument("--ttl-min", type=int, default=cfg.session_ttl_ms // MINUTE_MS)
    ap.add_argument("--now-ms", type=int, default=None, help="override the sweep time (epoch ms)")
    args = ap.parse_args(argv)

    configure_logging(cfg.log_level)

    path = os.path.abspath(args.db)
    if not os.path.exists(path):
        print(f"No database at {path}")
        return 1

    store = SqliteStore(path)
    store.init()
    try:
        sessions = BattleSessions(store, ttl_ms=args.ttl_min * MINUTE_MS)
        now = args.now_ms if args.now_ms is not None else int(time.time() * 1000)
        deleted = sessions.purge_expired(now)
    finally:
        store.close()
    print(f"Deleted {deleted} session(s)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
