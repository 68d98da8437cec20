from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv


StoreBackend = Literal["memory", "redis"]


@dataclass(frozen=True, slots=True)
class Settings:
    store: StoreBackend
    redis_url: str
    lock_timeout_ms: int
    max_redraws: int | None
    log_level: str
    cookie_secure: bool


def _int_or_none(raw: str | None) -> int | None:
    if raw is None or raw.strip() == "":
        return None
    value = int(raw)
    if value < 0:
        raise ValueError("SLOTMACHINE_MAX_REDRAWS must be >= 0")
    return value


def load_dotenv_if_present(*, project_root: Path | None = None) -> None:
    root = project_root or Path(__file__).resolve().parents[1]
    env_path = root / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path, override=False)


def settings_from_env() -> Settings:
    store = os.environ.get("SLOTMACHINE_STORE", "memory").strip().lower()
    if store not in ("memory", "redis"):
        raise RuntimeError(f"SLOTMACHINE_STORE must be 'memory' or 'redis', got {store!r}")

    return Settings(
        store=store,  # type: ignore[arg-type]
        redis_url=os.environ.get("REDIS_URL", "redis://localhost:6379/0"),
        lock_timeout_ms=int(os.environ.get("SLOTMACHINE_LOCK_TIMEOUT_MS", "5000")),
        max_redraws=_int_or_none(os.environ.get("SLOTMACHINE_MAX_REDRAWS")),
        log_level=os.environ.get("SLOTMACHINE_LOG_LEVEL", "INFO").upper(),
        cookie_secure=os.environ.get("SLOTMACHINE_COOKIE_SECURE", "0") == "1",
    )
