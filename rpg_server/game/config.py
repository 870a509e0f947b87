"""Ports, persistence, TTL windows."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

MINUTE_MS = 60_000


@dataclass
class ServerConfig:
    # Versions
    server_version: str = "0.1.0"

    # Network
    host: str = "0.0.0.0"
    port: int = 3000
    cors_allow_all: bool = True
    cors_allowed_origins: list[str] = field(default_factory=list)
    max_body_mb: int = 50

    # Persistence
    sqlite_enabled: bool = True
    sqlite_path: str = "rpg.sqlite3"

    # Visibility windows (epoch ms)
    recruit_ttl_ms: int = 30 * MINUTE_MS
    request_ttl_ms: int = 30 * MINUTE_MS
    session_ttl_ms: int = 60 * MINUTE_MS

    ranking_limit: int = 100

    log_level: str = "INFO"

    @staticmethod
    def _parse_bool(v: str | None, default: bool) -> bool:
        if v is None:
            return default
        return v.strip().lower() in ("1", "true", "yes", "on")

    @staticmethod
    def _parse_int(name: str, default: int) -> int:
        raw = os.environ.get(name)
        if not raw:
            return default
        try:
            return int(raw)
        except ValueError:
            logger.warning("ignoring %s=%r, not an integer", name, raw)
            return default

    @classmethod
    def from_env(cls) -> "ServerConfig":
        cfg = cls()
        cfg.host = os.environ.get("RPG_HOST", cfg.host)
        # PORT is what most PaaS hosts inject.
        cfg.port = cls._parse_int("RPG_PORT", cls._parse_int("PORT", cfg.port))
        cfg.cors_allow_all = cls._parse_bool(os.environ.get("RPG_CORS_ALLOW_ALL"), cfg.cors_allow_all)
        origins = os.environ.get("RPG_CORS_ORIGINS")
        if origins:
            cfg.cors_allowed_origins = [o.strip() for o in origins.split(",") if o.strip()]
        cfg.max_body_mb = cls._parse_int("RPG_MAX_BODY_MB", cfg.max_body_mb)

        cfg.sqlite_enabled = cls._parse_bool(os.environ.get("RPG_SQLITE"), cfg.sqlite_enabled)
        cfg.sqlite_path = os.environ.get("RPG_SQLITE_PATH", cfg.sqlite_path)

        cfg.ranking_limit = cls._parse_int("RPG_RANKING_LIMIT", cfg.ranking_limit)
        cfg.log_level = os.environ.get("RPG_LOG_LEVEL", cfg.log_level).upper()
        return cfg
