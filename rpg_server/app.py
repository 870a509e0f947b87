"""HTTP entrypoint.

Thin JSON routing over the stores in `rpg_server.game`. Each request captures
"now" once (epoch ms) and hands it down; nothing below this module reads a
clock.
"""

from __future__ import annotations

import logging
import time
import uuid
from typing import Any, Callable

from aiohttp import web

from rpg_server.game.config import ServerConfig
from rpg_server.game.errors import NotFound, StorageFailure
from rpg_server.game.parties import PartyStore
from rpg_server.game.party_requests import PartyRequests
from rpg_server.game.ranking import CharacterStore, InventoryStore, RankingIndex
from rpg_server.game.recruits import RecruitmentBoard
from rpg_server.game.sessions import BattleSessions
from rpg_server.net import protocol
from rpg_server.net.logs import configure_logging
from rpg_server.storage.memory import MemoryStore
from rpg_server.storage.sqlite import SqliteStore

logger = logging.getLogger(__name__)


def wall_clock_ms() -> int:
    return int(time.time() * 1000)


def open_store(config: ServerConfig):
    if config.sqlite_enabled:
        return SqliteStore(config.sqlite_path)
    return MemoryStore()


class RpgService:
    def __init__(self, config: ServerConfig, store=None, clock: Callable[[], int] | None = None):
        self.config = config
        self.server_id = str(uuid.uuid4())
        self.start_time = time.time()
        self.clock = clock or wall_clock_ms

        self.store = store if store is not None else open_store(config)

        self.ranking = RankingIndex(self.store)
        self.characters = CharacterStore(self.store, self.ranking)
        self.inventories = InventoryStore(self.store)
        self.recruits = RecruitmentBoard(self.store, ttl_ms=config.recruit_ttl_ms)
        self.requests = PartyRequests(self.store, ttl_ms=config.request_ttl_ms)
        self.parties = PartyStore(self.store)
        self.sessions = BattleSessions(self.store, ttl_ms=config.session_ttl_ms)

    def now(self) -> int:
        return int(self.clock())

    async def start(self) -> None:
        self.store.init()
        logger.info("rpg server %s using %s store", self.server_id, self.store.name)

    async def stop(self) -> None:
        self.store.close()

    def version_payload(self) -> dict[str, Any]:
        return {
            "serverId": self.server_id,
            "serverVersion": self.config.server_version,
            "store": self.store.name,
        }


def _cors_headers(config: ServerConfig, origin: str | None) -> dict[str, str]:
    if not origin:
        return {}
    if config.cors_allow_all:
        return {"Access-Control-Allow-Origin": origin, "Vary": "Origin"}
    if origin in config.cors_allowed_origins:
        return {"Access-Control-Allow-Origin": origin, "Vary": "Origin"}
    return {}


@web.middleware
async def cors_middleware(request: web.Request, handler):
    if request.method == "OPTIONS":
        origin = request.headers.get("Origin")
        headers = {
            **_cors_headers(request.app["config"], origin),
            "Access-Control-Allow-Methods": "GET,POST,DELETE,OPTIONS",
            "Access-Control-Allow-Headers": "Content-Type",
            "Access-Control-Max-Age": "86400",
        }
        return web.Response(status=204, headers=headers)

    resp = await handler(request)

    origin = request.headers.get("Origin")
    resp.headers.update(_cors_headers(request.app["config"], origin))
    return resp


@web.middleware
async def error_middleware(request: web.Request, handler):
    try:
        return await handler(request)
    except NotFound as e:
        return web.json_response({"error": str(e)}, status=404)
    except protocol.ProtocolError as e:
        return web.json_response({"error": str(e)}, status=400)
    except StorageFailure as e:
        logger.error("%s %s failed: %s", request.method, request.path, e)
        return web.json_response({"error": "storage failure"}, status=500)


async def _read_json(request: web.Request) -> Any:
    if not request.can_read_body:
        raise protocol.ProtocolError("body required")
    try:
        return await request.json()
    except ValueError as e:
        raise protocol.ProtocolError(f"invalid json: {e}") from e


def create_app(config: ServerConfig, store=None, clock: Callable[[], int] | None = None) -> web.Application:
    app = web.Application(
        middlewares=[cors_middleware, error_middleware],
        client_max_size=config.max_body_mb * 1024 * 1024,
    )
    svc = RpgService(config, store=store, clock=clock)

    app["config"] = config
    app["svc"] = svc

    async def on_startup(_: web.Application):
        await svc.start()

    async def on_cleanup(_: web.Application):
        await svc.stop()

    app.on_startup.append(on_startup)
    app.on_cleanup.append(on_cleanup)

    async def root(_: web.Request):
        return web.json_response({"status": "ok", "message": "rpg server is running", **svc.version_payload()})

    async def health(_: web.Request):
        return web.json_response({"ok": True, "uptimeSec": time.time() - svc.start_time, **svc.version_payload()})

    # Characters

    async def get_character(request: web.Request):
        return web.json_response(svc.characters.get(request.match_info["username"]))

    async def save_character(request: web.Request):
        sheet = protocol.require_object(await _read_json(request))
        res = svc.characters.save(request.match_info["username"], sheet, svc.now())
        return web.json_response(
            {"success": True, "updated_at": res.updated_at, "power": res.power, "ranked": res.ranked}
        )

    # Inventories

    async def get_inventory(request: web.Request):
        return web.json_response(svc.inventories.get(request.match_info["username"]))

    async def save_inventory(request: web.Request):
        body = protocol.InventoryBody.parse(protocol.require_object(await _read_json(request)))
        updated_at = svc.inventories.save(request.match_info["username"], body.items, svc.now())
        return web.json_response({"success": True, "updated_at": updated_at})

    async def ranking(_: web.Request):
        return web.json_response({"ranking": svc.ranking.top_n(svc.config.ranking_limit)})

    # Recruitment posts

    async def list_recruits(_: web.Request):
        return web.json_response({"recruits": svc.recruits.list_visible(svc.now())})

    async def get_recruit(request: web.Request):
        return web.json_response(svc.recruits.get(request.match_info["id"]))

    async def publish_recruit(request: web.Request):
        p = protocol.RecruitPost.parse(protocol.require_object(await _read_json(request)))
        recruit_id = svc.recruits.publish(
            p.id, p.username, p.charClass, p.level, p.power, p.message, p.maxMembers, svc.now()
        )
        return web.json_response({"success": True, "id": recruit_id})

    async def delete_recruit(request: web.Request):
        svc.recruits.remove(request.match_info["id"])
        return web.json_response({"success": True})

    # Party requests

    async def list_requests(request: web.Request):
        return web.json_response({"requests": svc.requests.list_for(request.match_info["username"], svc.now())})

    async def send_request(request: web.Request):
        r = protocol.PartyRequestBody.parse(protocol.require_object(await _read_json(request)))
        request_id = svc.requests.send(r.id, r.fromUser, r.toUser, r.charClass, r.level, r.power, svc.now())
        return web.json_response({"success": True, "id": request_id})

    async def delete_request(request: web.Request):
        svc.requests.remove(request.match_info["id"])
        return web.json_response({"success": True})

    # Parties

    async def get_party(request: web.Request):
        return web.json_response(svc.parties.get(request.match_info["partyId"]))

    async def save_party(request: web.Request):
        body = protocol.PartyBody.parse(protocol.require_object(await _read_json(request)))
        updated_at = svc.parties.save(request.match_info["partyId"], body.leader, body.data, svc.now())
        return web.json_response({"success": True, "updated_at": updated_at})

    async def delete_party(request: web.Request):
        svc.parties.remove(request.match_info["partyId"])
        return web.json_response({"success": True})

    # Battle sessions

    async def get_session(request: web.Request):
        return web.json_response(svc.sessions.get(request.match_info["sessionId"]))

    async def save_session(request: web.Request):
        payload = await _read_json(request)
        stamps = svc.sessions.save(request.match_info["sessionId"], payload, svc.now())
        return web.json_response({"success": True, **stamps})

    async def cleanup_sessions(_: web.Request):
        deleted = svc.sessions.purge_expired(svc.now())
        return web.json_response({"success": True, "deleted": deleted})

    # cors_middleware answers OPTIONS itself; the route only has to resolve.
    async def preflight(_: web.Request):
        return web.Response(status=204)

    app.router.add_get("/", root)
    app.router.add_get("/health", health)
    app.router.add_get("/api/character/{username}", get_character)
    app.router.add_post("/api/character/{username}", save_character)
    app.router.add_get("/api/inventory/{username}", get_inventory)
    app.router.add_post("/api/inventory/{username}", save_inventory)
    app.router.add_get("/api/ranking", ranking)
    app.router.add_get("/api/party-recruits", list_recruits)
    app.router.add_post("/api/party-recruits", publish_recruit)
    app.router.add_get("/api/party-recruits/{id}", get_recruit)
    app.router.add_delete("/api/party-recruits/{id}", delete_recruit)
    app.router.add_get("/api/party-requests/{username}", list_requests)
    app.router.add_post("/api/party-requests", send_request)
    app.router.add_delete("/api/party-requests/{id}", delete_request)
    app.router.add_get("/api/party/{partyId}", get_party)
    app.router.add_post("/api/party/{partyId}", save_party)
    app.router.add_delete("/api/party/{partyId}", delete_party)
    app.router.add_get("/api/battle-session/{sessionId}", get_session)
    app.router.add_post("/api/battle-session/{sessionId}", save_session)
    app.router.add_delete("/api/battle-sessions/cleanup", cleanup_sessions)
    app.router.add_route("OPTIONS", "/{tail:.*}", preflight)

    return app


def main() -> None:
    config = ServerConfig.from_env()
    configure_logging(config.log_level)
    app = create_app(config)
    web.run_app(app, host=config.host, port=config.port)


if __name__ == "__main__":
    main()
