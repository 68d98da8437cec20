from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager

import redis
from pydantic import ValidationError

from slotmachine.domain.records import SessionRecord
from slotmachine.domain.session import GameSession
from slotmachine.errors import InvalidData
from slotmachine.lock import KeyedLocks, session_lock


SESSIONS_SET_KEY = "slotmachine:sessions"
SESSION_KEY_PREFIX = "slotmachine:session:"  # + {session id}


def _session_key(session_id: str) -> str:
    return f"{SESSION_KEY_PREFIX}{session_id}"


class SessionStore(ABC):
    """Keyed session storage. Last write wins per id."""

    @abstractmethod
    def create(self, session: GameSession) -> None:
        raise NotImplementedError

    @abstractmethod
    def find_by_id(self, session_id: str) -> GameSession | None:
        raise NotImplementedError

    @abstractmethod
    def update(self, session: GameSession) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, session_id: str) -> None:
        raise NotImplementedError

    def snapshot(self, session: GameSession) -> SessionRecord:
        """Status view of a session, including roll history the store keeps."""
        return session.to_snapshot()

    @abstractmethod
    def lock(self, session_id: str) -> AbstractContextManager[None]:
        """Serialize mutating operations on one session id."""
        raise NotImplementedError


class InMemorySessionStore(SessionStore):
    """Holds live session objects, so roll history survives between calls."""

    def __init__(self, *, lock_timeout_ms: int = 5_000) -> None:
        self._sessions: dict[str, GameSession] = {}
        self._locks = KeyedLocks()
        self._lock_timeout_ms = lock_timeout_ms

    def create(self, session: GameSession) -> None:
        self._sessions[session.id] = session

    def find_by_id(self, session_id: str) -> GameSession | None:
        return self._sessions.get(session_id)

    def update(self, session: GameSession) -> None:
        self._sessions[session.id] = session

    def delete(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)
        self._locks.discard(session_id)

    def lock(self, session_id: str) -> AbstractContextManager[None]:
        return self._locks.hold(session_id, timeout_ms=self._lock_timeout_ms)

    def __len__(self) -> int:
        return len(self._sessions)


class RedisSessionStore(SessionStore):
    """JSON session records in Redis.

    Sessions loaded from here start with an empty history (see
    GameSession.from_record). Saves merge the session's new rolls into the
    stored history, so the record and the status snapshot stay append-only.
    """

    def __init__(self, r: redis.Redis, *, lock_ttl_ms: int = 5_000, lock_timeout_ms: int = 5_000) -> None:
        self._r = r
        self._lock_ttl_ms = lock_ttl_ms
        self._lock_timeout_ms = lock_timeout_ms

    def create(self, session: GameSession) -> None:
        self._r.set(_session_key(session.id), session.to_snapshot().model_dump_json())
        self._r.sadd(SESSIONS_SET_KEY, session.id)

    def find_by_id(self, session_id: str) -> GameSession | None:
        raw = self._r.get(_session_key(session_id))
        if not raw:
            return None
        return GameSession.from_json(raw)

    def _stored_record(self, session_id: str) -> SessionRecord | None:
        raw = self._r.get(_session_key(session_id))
        if not raw:
            return None
        try:
            return SessionRecord.model_validate_json(raw)
        except ValidationError as e:
            raise InvalidData(f"Invalid session record: {e.error_count()} error(s)") from e

    def snapshot(self, session: GameSession) -> SessionRecord:
        record = session.to_snapshot()
        stored = self._stored_record(session.id)
        if stored is not None:
            # Rolls this session object already holds replace their stored copies.
            held = {r.id for r in record.history}
            record.history = [r for r in stored.history if r.id not in held] + record.history
        return record

    def update(self, session: GameSession) -> None:
        self._r.set(_session_key(session.id), self.snapshot(session).model_dump_json())

    def delete(self, session_id: str) -> None:
        self._r.delete(_session_key(session_id))
        self._r.srem(SESSIONS_SET_KEY, session_id)

    def lock(self, session_id: str) -> AbstractContextManager[None]:
        return session_lock(
            r=self._r,
            session_id=session_id,
            ttl_ms=self._lock_ttl_ms,
            timeout_ms=self._lock_timeout_ms,
        )

    def session_ids(self) -> list[str]:
        return sorted(self._r.smembers(SESSIONS_SET_KEY))
