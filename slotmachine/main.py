from __future__ import annotations

import logging

from fastapi import FastAPI

from slotmachine.api.routes import router
from slotmachine.config import Settings, load_dotenv_if_present, settings_from_env
from slotmachine.infra.redis_client import create_redis
from slotmachine.random_draw import RandomDraw
from slotmachine.session_store import InMemorySessionStore, RedisSessionStore, SessionStore

load_dotenv_if_present()
_settings = settings_from_env()

# Configure logging
logging.basicConfig(level=_settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="slotmachine", version="0.1.0")
app.include_router(router)


def build_store(settings: Settings) -> SessionStore:
    if settings.store == "redis":
        return RedisSessionStore(create_redis(settings.redis_url), lock_timeout_ms=settings.lock_timeout_ms)
    return InMemorySessionStore(lock_timeout_ms=settings.lock_timeout_ms)


@app.on_event("startup")
async def _startup() -> None:
    app.state.settings = _settings
    app.state.store = build_store(_settings)
    app.state.random_source = RandomDraw()
    logger.info("slotmachine started with %s session store", _settings.store)


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "slotmachine", "version": "0.1.0"}
