from __future__ import annotations

from collections.abc import Generator, Iterable

import fakeredis
import pytest
from fastapi.testclient import TestClient

from slotmachine.domain.symbols import Symbol
from slotmachine.random_draw import RandomSource
from slotmachine.session_store import InMemorySessionStore, RedisSessionStore


class ScriptedRandom(RandomSource):
    """Plays back fixed draws and suppression decisions, recording what it was asked."""

    def __init__(self, draws: Iterable[list[Symbol]] = (), suppress: Iterable[bool] = ()):
        self.draws = list(draws)
        self.suppress = list(suppress)
        self.suppress_queries: list[int] = []
        self.draw_calls = 0

    def draw_symbols(self, n: int) -> list[Symbol]:
        self.draw_calls += 1
        if not self.draws:
            raise AssertionError("ScriptedRandom ran out of draws")
        out = self.draws.pop(0)
        assert len(out) == n
        return out

    def should_suppress(self, current_credits: int) -> bool:
        self.suppress_queries.append(current_credits)
        if not self.suppress:
            raise AssertionError("ScriptedRandom ran out of suppression decisions")
        return self.suppress.pop(0)


@pytest.fixture()
def scripted() -> ScriptedRandom:
    return ScriptedRandom()


@pytest.fixture()
def memory_store() -> InMemorySessionStore:
    return InMemorySessionStore(lock_timeout_ms=100)


@pytest.fixture()
def redis_store() -> RedisSessionStore:
    r = fakeredis.FakeRedis(decode_responses=True)
    return RedisSessionStore(r, lock_ttl_ms=1_000, lock_timeout_ms=50)


@pytest.fixture()
def client_and_store(scripted: ScriptedRandom) -> Generator[tuple[TestClient, InMemorySessionStore, ScriptedRandom], None, None]:
    """TestClient wired to an in-memory store and a scripted random source."""

    from slotmachine.api.deps import get_random_source, get_store
    from slotmachine.main import app

    store = InMemorySessionStore(lock_timeout_ms=100)

    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_random_source] = lambda: scripted
    with TestClient(app) as c:
        yield c, store, scripted
    app.dependency_overrides.clear()
