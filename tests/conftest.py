from __future__ import annotations

import pytest

from rpg_server.app import create_app
from rpg_server.game.config import ServerConfig
from rpg_server.storage.memory import MemoryStore
from rpg_server.storage.sqlite import SqliteStore

MIN = 60_000
T0 = 1_700_000_000_000


class FakeClock:
    def __init__(self, now: int = T0):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    if request.param == "memory":
        s = MemoryStore()
    else:
        s = SqliteStore(str(tmp_path / "rpg.sqlite3"))
    s.init()
    yield s
    s.close()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def config() -> ServerConfig:
    return ServerConfig(sqlite_enabled=False)


@pytest.fixture
async def client(aiohttp_client, config, clock):
    return await aiohttp_client(create_app(config, clock=clock))
