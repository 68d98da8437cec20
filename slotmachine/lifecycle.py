from __future__ import annotations

import logging
from uuid import uuid4

from slotmachine.api.models import CashOutResult, CreatedSession, SessionStatusResult
from slotmachine.domain.session import STARTING_CREDITS, GameSession
from slotmachine.errors import SessionInactive, SessionNotFound
from slotmachine.session_store import SessionStore


logger = logging.getLogger(__name__)


class SessionLifecycle:
    """Create, inspect, cash out and end sessions."""

    def __init__(self, store: SessionStore):
        self._store = store

    def _require(self, session_id: str) -> GameSession:
        session = self._store.find_by_id(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    def create(self) -> CreatedSession:
        session = GameSession(str(uuid4()), STARTING_CREDITS)
        self._store.create(session)
        logger.info("created session %s with %d credits", session.id, session.credits)
        return CreatedSession(id=session.id, credits=session.credits)

    def get_status(self, session_id: str) -> SessionStatusResult:
        session = self._require(session_id)
        state = "active" if session.active else "closed"
        return SessionStatusResult(
            session=self._store.snapshot(session),
            message=f"Session is {state}, you have {session.credits} credits",
        )

    def cash_out(self, session_id: str) -> CashOutResult:
        with self._store.lock(session_id):
            session = self._require(session_id)
            if not session.active:
                raise SessionInactive(session_id)
            credits = session.cash_out()
            self._store.update(session)

        logger.info("session %s cashed out %d credits", session_id, credits)
        return CashOutResult(
            credits=credits,
            message=f"Session ended successfully, you have received {credits} credits",
        )

    def end(self, session_id: str) -> None:
        with self._store.lock(session_id):
            self._require(session_id)
            self._store.delete(session_id)
        logger.info("deleted session %s", session_id)
