from __future__ import annotations

import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager

import redis

from slotmachine.errors import SessionBusy


@contextmanager
def session_lock(
    *,
    r: redis.Redis,
    session_id: str,
    ttl_ms: int = 5_000,
    timeout_ms: int = 5_000,
    poll_s: float = 0.01,
) -> Iterator[None]:
    """Best-effort per-session lock backed by a Redis key.

    Waits up to `timeout_ms` for the key, then raises SessionBusy. The TTL
    frees the key if a holder dies mid-operation.
    """

    key = f"lock:session:{session_id}"
    deadline = time.monotonic() + timeout_ms / 1000
    while not r.set(key, "1", nx=True, px=ttl_ms):
        if time.monotonic() >= deadline:
            raise SessionBusy(session_id)
        time.sleep(poll_s)
    try:
        yield
    finally:
        r.delete(key)


class KeyedLocks:
    """In-process registry of one lock per session id."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def _lock_for(self, key: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    @contextmanager
    def hold(self, key: str, *, timeout_ms: int = 5_000) -> Iterator[None]:
        lock = self._lock_for(key)
        if not lock.acquire(timeout=timeout_ms / 1000):
            raise SessionBusy(key)
        try:
            yield
        finally:
            lock.release()

    def discard(self, key: str) -> None:
        with self._guard:
            self._locks.pop(key, None)
