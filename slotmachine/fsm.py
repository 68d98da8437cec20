from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

from statemachine import State, StateMachine

if TYPE_CHECKING:
    from slotmachine.domain.session import GameSession


class SessionStatus(StrEnum):
    active = "active"
    closed = "closed"


class SessionFSM(StateMachine):
    """Guards the active -> closed transition of a session.

    `close` is allowed from `closed` too so deactivation stays idempotent;
    callers that must reject a second close (cash-out) check the session's
    status first.
    """

    active = State(SessionStatus.active.value, value=SessionStatus.active.value, initial=True)
    closed = State(SessionStatus.closed.value, value=SessionStatus.closed.value)

    close = active.to(closed) | closed.to.itself()

    def __init__(self, session: "GameSession"):
        self.session = session
        super().__init__(start_value=session.status.value)

    def sync_status_to_model(self) -> SessionStatus:
        status = SessionStatus(str(self.current_state_value))
        self.session.status = status
        return status
